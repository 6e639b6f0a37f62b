"""
Tests for the codec fallback reader.
"""

import logging

from vcardlib.codec import decode_bytes


GBK_CARD = 'BEGIN:VCARD\r\nFN:张三\r\nEND:VCARD'


class TestPrimaryCodec:
    """Tests for buffers the primary codec accepts."""

    def test_utf8_buffer(self):
        """Should decode valid UTF-8 with the primary codec."""
        text = 'BEGIN:VCARD\r\nFN:Zoë\r\nEND:VCARD'
        assert decode_bytes(text.encode('utf-8')) == text

    def test_sequence_cut_by_sample_boundary(self):
        """Should not fall back when the sample ends inside a multi-byte sequence."""
        text = 'A' * 99 + 'é'
        assert decode_bytes(text.encode('utf-8')) == text

    def test_invalid_bytes_after_sample_are_replaced(self):
        """Should commit to the primary codec and replace later invalid bytes."""
        assert decode_bytes(b'A' * 150 + b'\xff') == 'A' * 150 + '\ufffd'

    def test_empty_buffer(self):
        """Should decode an empty buffer to an empty string."""
        assert decode_bytes(b'') == ''


class TestFallback:
    """Tests for the secondary codec fallback."""

    def test_gbk_fallback(self, caplog):
        """Should decode the whole buffer as GBK when the sample is not UTF-8."""
        with caplog.at_level(logging.INFO, logger='vcardlib.codec'):
            assert decode_bytes(GBK_CARD.encode('gbk')) == GBK_CARD

        assert 'falling back to gbk' in caplog.text

    def test_custom_secondary_codec(self):
        """Should use the secondary codec passed by the caller."""
        assert decode_bytes(b'caf\xe9 au lait', secondary='latin-1') == 'café au lait'

    def test_custom_sample_size(self):
        """Should only inspect the requested number of bytes."""
        data = b'A' * 10 + b'caf\xe9 au lait'
        assert decode_bytes(data, secondary='latin-1', sample_size=10) == 'A' * 10 + 'caf\ufffd au lait'

    def test_unknown_codec(self, caplog):
        """Should log and return an empty string for an unknown codec."""
        assert decode_bytes(b'abc', primary='no-such-codec') == ''
        assert 'cannot decode' in caplog.text
