import os

from libb import Setting

Setting.unlock()

# Filter naming
buffer = Setting()
buffer.namespace = os.getenv('CONFIG_STREAMBUFFER_NAMESPACE', 'streambuffer')
buffer.id_bytes = int(os.getenv('CONFIG_STREAMBUFFER_ID_BYTES', 0)) or 8

# Write path
stream = Setting()
stream.chunk_size = int(os.getenv('CONFIG_STREAMBUFFER_CHUNK_SIZE', 0)) or 8192

# Logging
log = Setting()
log.enable = os.getenv('CONFIG_STREAMBUFFER_LOG_ENABLE', '').lower() in {'1', 'true', 'yes'}

Setting.lock()
