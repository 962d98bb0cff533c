from __future__ import annotations

# python imports:
import contextlib
import logging
import socket
import ssl
from typing import Iterator, Optional as Opt, Type

# pop3 imports:
from base_proto import Closed, TransportError
from transport import SyncTransport
from util import BYTES

logger = logging.getLogger ( __name__ )


@contextlib.contextmanager
def transport_error_if_oserror() -> Iterator[None]:
	try:
		yield
	except OSError as e:
		raise TransportError ( repr ( e ) ) from e


class SocketTransport ( SyncTransport ):
	sock: socket.socket
	
	def __init__ ( self, sock: socket.socket, ssl_context: Opt[ssl.SSLContext] = None ) -> None:
		self.sock = sock
		if ssl_context is not None:
			self.ssl_context = ssl_context
	
	@classmethod
	def connect ( cls: Type[SocketTransport],
		hostname: str,
		port: int,
		tls: bool,
		ssl_context: Opt[ssl.SSLContext] = None,
	) -> SocketTransport:
		log = logger.getChild ( 'SocketTransport.connect' )
		
		with transport_error_if_oserror():
			addresses = socket.getaddrinfo ( hostname, port, type = socket.SOCK_STREAM )
		for *params, _, address in addresses:
			sock = socket.socket ( *params )
			try:
				sock.connect ( address )
			except OSError as e:
				log.warning ( f'Error connecting to {address=}: {e!r}' )
				sock.close()
				continue
			else:
				self = cls ( sock, ssl_context )
				if tls:
					try:
						self.starttls_client ( hostname )
					except TransportError:
						self.close()
						raise
				return self
		raise TransportError ( f'Unable to connect to {hostname=} {port=}' )
	
	def read_into ( self, buf: memoryview ) -> int:
		#log = logger.getChild ( 'SocketTransport.read_into' )
		with transport_error_if_oserror():
			n = self.sock.recv_into ( buf )
		if n == 0 and len ( buf ) > 0:
			raise Closed ( 'EOF' )
		return n
	
	def write ( self, data: BYTES ) -> None:
		#log = logger.getChild ( 'SocketTransport.write' )
		with transport_error_if_oserror():
			self.sock.sendall ( data )
	
	def starttls_client ( self, server_hostname: str ) -> None:
		context = self.ssl_context_or_default_client()
		
		with transport_error_if_oserror():
			self.sock = context.wrap_socket (
				self.sock,
				server_hostname = server_hostname,
			)
	
	def close ( self ) -> None:
		#log = logger.getChild ( 'SocketTransport.close' )
		self.sock.close()
