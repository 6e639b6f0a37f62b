import logging
import os

from vcardlib.codec import PRIMARY_CODEC, SECONDARY_CODEC, SAMPLE_SIZE
from vcardlib.core import Card, DEFAULT_VERSION, SUPPORTED_VERSIONS, decode, encode


logger = logging.getLogger(__name__)


def decode_file(path, primary=PRIMARY_CODEC, secondary=SECONDARY_CODEC, sample_size=SAMPLE_SIZE):
    try:
        with open(path, 'rb') as input_stream:
            data = input_stream.read()
    except OSError as exc:
        logger.error(f'"{path}": {exc}')
        return []

    vcards = decode(data, primary, secondary, sample_size)
    logger.debug(f'decoded {len(vcards)} vcards from "{path}"')

    return vcards


def encode_file(vcards, path, version=DEFAULT_VERSION, make_dirs=False, fold_width=None):
    """Write one card, or a sequence of cards, to `path`.

    Returns False when the version is unsupported, when the parent directory
    is missing and `make_dirs` is not set, or when the write fails.
    """
    if version not in SUPPORTED_VERSIONS:
        logger.error(f'"{path}": unsupported vcard version {version!r}')
        return False

    if isinstance(vcards, Card):
        data = vcards.encode(version, fold_width)
    else:
        data = encode(vcards, version, fold_width)

    pathname = os.path.abspath(os.fspath(path))
    directory = os.path.dirname(pathname)

    try:
        if make_dirs:
            os.makedirs(directory, exist_ok=True)
        elif not os.path.isdir(directory):
            logger.error(f'"{directory}" is not a directory.')
            return False

        with open(pathname, 'wb') as output_stream:
            output_stream.write(data)
    except OSError as exc:
        logger.error(f'"{pathname}": {exc}')
        return False

    return True
