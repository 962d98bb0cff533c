# python imports:
from abc import ABCMeta, abstractmethod
import logging
import ssl
from typing import Optional as Opt

# pop3 imports:
from util import BYTES

logger = logging.getLogger ( __name__ )


class Transport ( metaclass = ABCMeta ):
	ssl_context: Opt[ssl.SSLContext] = None # the trust store, system default if not set
	
	def ssl_context_or_default_client ( self ) -> ssl.SSLContext:
		if self.ssl_context is None:
			self.ssl_context = ssl.create_default_context ( ssl.Purpose.SERVER_AUTH )
		return self.ssl_context


class SyncTransport ( Transport ):
	@abstractmethod
	def read_into ( self, buf: memoryview ) -> int:
		'''
		block until some data is available, copy it into buf and return
		the number of bytes copied
		'''
		cls = type ( self )
		raise NotImplementedError ( f'{cls.__module__}.{cls.__name__}.read_into()' )
	
	@abstractmethod
	def write ( self, data: BYTES ) -> None:
		cls = type ( self )
		raise NotImplementedError ( f'{cls.__module__}.{cls.__name__}.write()' )
	
	@abstractmethod
	def close ( self ) -> None:
		cls = type ( self )
		raise NotImplementedError ( f'{cls.__module__}.{cls.__name__}.close()' )
