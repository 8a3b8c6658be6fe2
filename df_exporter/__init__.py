"""
Animated DF Exporter Package

Exports Animated Java rigs and their animations as DiamondFire code
templates and delivers them through the CodeClient API.
"""

__version__ = '0.1.0'
__author__ = 'Animated Java DF Team'

from df_exporter.errors import (
    DFExportError,
    ValidationError,
    PayloadBuildError,
    TransportError,
    TransportConnectError,
    TransportSendError,
    RemoteRejection,
)
from df_exporter.exporter import RigExporter

__all__ = [
    'RigExporter',
    'DFExportError',
    'ValidationError',
    'PayloadBuildError',
    'TransportError',
    'TransportConnectError',
    'TransportSendError',
    'RemoteRejection',
    '__version__',
]
