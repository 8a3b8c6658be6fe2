"""
Animated DF CodeClient Module

Builds `give` commands for code templates and delivers them to the
CodeClient mod over its local WebSocket API.
"""

from df_exporter.codeclient.compression import gzip_compress, to_base64_gzip
from df_exporter.codeclient.give_command import (
    GiveCommandBuilder,
    CODETEMPLATE_PAYLOAD_TOKEN,
    parse_codetemplate_data,
)
from df_exporter.codeclient.transport import CodeClientTransport, TransportState

__all__ = [
    'CodeClientTransport',
    'TransportState',
    'GiveCommandBuilder',
    'CODETEMPLATE_PAYLOAD_TOKEN',
    'parse_codetemplate_data',
    'gzip_compress',
    'to_base64_gzip',
]
