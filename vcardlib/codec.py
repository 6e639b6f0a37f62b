import codecs
import logging


logger = logging.getLogger(__name__)

PRIMARY_CODEC = 'utf-8'
SECONDARY_CODEC = 'gbk'
SAMPLE_SIZE = 100


def _sample_is_valid(data, codec, sample_size):
    decoder = codecs.getincrementaldecoder(codec)()

    try:
        # not final: a multi-byte sequence cut by the sample boundary is fine
        decoder.decode(data[:sample_size], final=False)
    except UnicodeDecodeError:
        return False

    return True


def decode_bytes(data, primary=PRIMARY_CODEC, secondary=SECONDARY_CODEC, sample_size=SAMPLE_SIZE):
    """Decode a whole buffer with one codec chosen from a leading sample.

    The first `sample_size` bytes are decoded with `primary`. If that sample
    holds an invalid sequence the entire buffer is decoded with `secondary`,
    otherwise with `primary`. Undecodable bytes are replaced, never raised.
    """
    data = bytes(data)

    try:
        if _sample_is_valid(data, primary, sample_size):
            codec = primary
        else:
            logger.info(f'invalid {primary} sequence in the first {sample_size} bytes, falling back to {secondary}')
            codec = secondary

        return data.decode(codec, errors='replace')
    except LookupError as exc:
        logger.error(f'cannot decode vcard data: {exc}')
        return ''
