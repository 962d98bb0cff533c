from __future__ import annotations

# python imports:
from abc import ABCMeta
import contextlib
import logging
from typing import Iterator, Type

# pop3 imports:
from base_proto import (
	RequestType, ResponseType, Event, SendDataEvent, ClientProtocol,
)
from line_reader import BUFFER_SIZE, LineReader
from transport import SyncTransport
from util import b2s

logger = logging.getLogger ( __name__ )


@contextlib.contextmanager
def _event_exception_safety ( event: Event ) -> Iterator[None]:
	try:
		yield
	except Exception as e:
		event.exc = e


def _loggable ( chunk: bytes ) -> str:
	line = b2s ( chunk, 'utf-8', 'replace' ).rstrip()
	if line[:5].upper() == 'PASS ':
		return f'{line[:5]}****'
	return line


class SyncEventHandler:
	transport: SyncTransport
	
	def on_SendDataEvent ( self, event: SendDataEvent ) -> None:
		log = logger.getChild ( 'SyncEventHandler.on_SendDataEvent' )
		for chunk in event.chunks:
			log.debug ( f'C>{_loggable(chunk)}' )
			self.transport.write ( chunk )
	
	def _on_event ( self, event: Event ) -> None:
		#log = logger.getChild ( 'SyncEventHandler._on_event' )
		with _event_exception_safety ( event ):
			func = getattr ( self, f'on_{type(event).__name__}' )
			func ( event )


class Client ( metaclass = ABCMeta ):
	protocls: Type[ClientProtocol]
	proto: ClientProtocol


class SyncClient ( SyncEventHandler, Client ):
	BUFFER_SIZE: int = BUFFER_SIZE
	
	def __init__ ( self,
		transport: SyncTransport,
	) -> None:
		self.transport = transport
		self.proto = self.protocls()
		self.reader = LineReader ( self.BUFFER_SIZE )
	
	def _request ( self, request: RequestType[ResponseType] ) -> ResponseType:
		log = logger.getChild ( 'SyncClient._request' )
		try:
			for event in self.proto.send ( request ):
				self._on_event ( event )
			while not request.base_response:
				line = self.reader.read_line ( self.transport )
				log.debug ( f'S>{line}' )
				for event in self.proto.receive_line ( line ):
					self._on_event ( event )
		except BaseException:
			self.proto.abandon()
			raise
		assert (
			request.base_response is not None
		and
			request.base_response.is_success()
		), f'invalid {request.base_response=}'
		return request.response
