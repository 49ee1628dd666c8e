"""Tests for streambuffer.exceptions."""
import pytest

from streambuffer.exceptions import BufferNotFound, InvalidResourceType
from streambuffer.exceptions import StreamBufferError, StreamBufferNotRegistered
from streambuffer.exceptions import StreamFilterError, StreamWriteError

#
# Message tests
#


class TestInvalidResourceType:

    @pytest.mark.parametrize(('value', 'type_name'), [
        ('something', 'str'),
        (42, 'int'),
        (None, 'NoneType'),
    ])
    def test_message_names_type(self, value, type_name):
        exc = InvalidResourceType.from_stream_not_resource(value)
        assert str(exc) == f'The stream to intercept MUST be a writable stream but provided "{type_name}".'


class TestStreamBufferNotRegistered:

    def test_message(self):
        exc = StreamBufferNotRegistered.from_not_registered()
        assert str(exc) == 'StreamBuffer.register() MUST be called before intercepting a stream.'


class TestBufferNotFound:

    def test_stop_variant(self):
        exc = BufferNotFound.from_stop_intercepting_missing_buffer('ns.abc')
        assert exc.operation == 'stop'
        assert exc.identifier == 'ns.abc'
        assert 'stop intercepting a buffer that is not currently intercepting' in str(exc)

    def test_output_variant(self):
        exc = BufferNotFound.from_output_missing_buffer()
        assert exc.operation == 'output'
        assert exc.identifier is None
        assert 'get output for a buffer' in str(exc)

    def test_reset_variant(self):
        exc = BufferNotFound.from_reset_missing_buffer()
        assert exc.operation == 'reset'
        assert 'reset a buffer' in str(exc)

    def test_identifier_not_found(self):
        exc = BufferNotFound.from_buffer_identifier_not_found('foobar', 'output')
        assert str(exc) == 'Unable to find a buffer matching identifier "foobar".'
        assert exc.operation == 'output'
        assert exc.identifier == 'foobar'


#
# Hierarchy tests
#


class TestHierarchy:

    @pytest.mark.parametrize('exc', [
        InvalidResourceType, StreamBufferNotRegistered, BufferNotFound,
        StreamFilterError, StreamWriteError,
    ])
    def test_subclasses_base(self, exc):
        assert issubclass(exc, StreamBufferError)

    def test_write_error_is_oserror(self):
        assert issubclass(StreamWriteError, OSError)

    def test_base_is_exception(self):
        assert issubclass(StreamBufferError, Exception)
