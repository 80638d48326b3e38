from formclient.application.ports.logger import LoggerPort
from formclient.application.ports.multipart_writer import MultipartWriterPort
from formclient.application.ports.transport import TransportFactory, TransportPort

__all__ = ["LoggerPort", "MultipartWriterPort", "TransportFactory", "TransportPort"]
