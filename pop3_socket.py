from __future__ import annotations

# python imports:
import logging
import ssl
from typing import Optional as Opt, Type

# pop3 imports:
import pop3_sync
from transport_socket import SocketTransport as Transport

logger = logging.getLogger ( __name__ )

POP3S_PORT = 995


class Client ( pop3_sync.Client ):
	@classmethod
	def connect ( cls: Type[Client],
		hostname: str,
		port: int = POP3S_PORT,
		ssl_context: Opt[ssl.SSLContext] = None,
	) -> Client:
		'''
		open a TLS connection and wait for the server greeting.
		ssl_context is the trust store, the system default one is used if
		not given
		'''
		log = logger.getChild ( 'Client.connect' )
		transport = Transport.connect ( hostname, port, True, ssl_context )
		self = cls ( transport )
		try:
			r = self.greeting()
		except BaseException:
			self._quit_sent = True # no session to quit
			transport.close()
			raise
		log.debug ( f'connected to {hostname}:{port}: {r.message!r}' )
		return self
