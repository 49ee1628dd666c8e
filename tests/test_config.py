import importlib
import os
from unittest.mock import patch

import pytest

ENV_KEYS = (
    'CONFIG_STREAMBUFFER_NAMESPACE',
    'CONFIG_STREAMBUFFER_ID_BYTES',
    'CONFIG_STREAMBUFFER_CHUNK_SIZE',
    'CONFIG_STREAMBUFFER_LOG_ENABLE',
)


def _reload(**env):
    """Reload streambuffer.config with only the given CONFIG_ variables set."""
    clean = {k: v for k, v in os.environ.items() if k not in ENV_KEYS}
    clean.update(env)
    with patch.dict(os.environ, clean, clear=True):
        import streambuffer.config
        importlib.reload(streambuffer.config)
        return streambuffer.config


@pytest.fixture(autouse=True)
def restore_config():
    yield
    _reload()


#
# buffer configuration tests
#


class TestBufferConfig:

    def test_namespace_default(self):
        """Test namespace defaults to 'streambuffer'."""
        config = _reload()
        assert config.buffer.namespace == 'streambuffer'

    def test_namespace_from_environment(self):
        """Test namespace uses CONFIG_STREAMBUFFER_NAMESPACE."""
        config = _reload(CONFIG_STREAMBUFFER_NAMESPACE='myapp')
        assert config.buffer.namespace == 'myapp'

    def test_id_bytes_default(self):
        config = _reload()
        assert config.buffer.id_bytes == 8

    def test_id_bytes_from_environment(self):
        config = _reload(CONFIG_STREAMBUFFER_ID_BYTES='16')
        assert config.buffer.id_bytes == 16

    def test_id_bytes_zero_uses_default(self):
        """Test id_bytes falls back to 8 when set to 0."""
        config = _reload(CONFIG_STREAMBUFFER_ID_BYTES='0')
        assert config.buffer.id_bytes == 8


#
# stream configuration tests
#


class TestStreamConfig:

    def test_chunk_size_default(self):
        config = _reload()
        assert config.stream.chunk_size == 8192

    def test_chunk_size_from_environment(self):
        config = _reload(CONFIG_STREAMBUFFER_CHUNK_SIZE='1024')
        assert config.stream.chunk_size == 1024


#
# log configuration tests
#


class TestLogConfig:

    def test_log_disabled_by_default(self):
        config = _reload()
        assert config.log.enable is False

    @pytest.mark.parametrize('value', ['1', 'true', 'TRUE', 'yes'])
    def test_log_enabled_values(self, value):
        config = _reload(CONFIG_STREAMBUFFER_LOG_ENABLE=value)
        assert config.log.enable is True

    @pytest.mark.parametrize('value', ['0', 'false', 'no', ''])
    def test_log_disabled_values(self, value):
        config = _reload(CONFIG_STREAMBUFFER_LOG_ENABLE=value)
        assert config.log.enable is False
