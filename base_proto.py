from __future__ import annotations

# python imports:
from abc import ABCMeta, abstractmethod
import logging
from typing import (
	Callable, Generator, Generic, Iterator, List, Optional as Opt,
	Sequence as Seq, Type, TypeVar,
)

# pop3 imports:
from util import s2b

logger = logging.getLogger ( __name__ )

TERMINATOR = '.'

#region ERRORS

class Error ( Exception ):
	pass


class TransportError ( Error ):
	pass


class Closed ( TransportError ):
	def __init__ ( self, reason: str = '' ) -> None:
		super().__init__ ( reason or '(none given)' )


class BufferExceeded ( Error ):
	pass


class DecodeError ( Error ):
	pass


class ProtocolError ( Error ):
	pass


class ParseError ( Error ):
	def __init__ ( self, field: str, value: Opt[str] = None ) -> None:
		self.field = field
		self.value = value
		if value is None:
			super().__init__ ( f'missing {field}' )
		else:
			super().__init__ ( f'invalid {field}: {value!r}' )

#endregion ERRORS


class Event ( Exception ):
	exc: Opt[BaseException] = None

	def go ( self ) -> Iterator[Event]:
		yield self

	def __repr__ ( self ) -> str:
		cls = type ( self )
		return f'{cls.__module__}.{cls.__name__}()'


ResponseType = TypeVar ( 'ResponseType', bound = 'BaseResponse' )
class BaseResponse ( Exception, metaclass = ABCMeta ):
	@abstractmethod
	def is_success ( self ) -> bool:
		cls = self.__class__
		raise NotImplementedError ( f'{cls.__module__}.{cls.__name__}.is_success()' )


RequestProtocolGenerator = Generator[Event,None,None]


class BaseRequest ( metaclass = ABCMeta ):
	# this class is the basis of all client command handling
	# 1) client uses __init__() to construct request
	# 2) _client_protocol() implements the client-side state machine
	# 3) the state machine finishes by raising its response
	base_response: Opt[BaseResponse] = None

	def __repr__ ( self ) -> str:
		cls = type ( self )
		return f'{cls.__module__}.{cls.__name__}()'

	@abstractmethod
	def _client_protocol ( self, client: ClientProtocol ) -> RequestProtocolGenerator:
		cls = type ( self )
		raise NotImplementedError ( f'{cls.__module__}.{cls.__name__}._client_protocol()' )


class RequestT ( BaseRequest, Generic[ResponseType] ):
	responsecls: Type[ResponseType]

	@property
	def response ( self ) -> ResponseType:
		assert isinstance ( self.base_response, self.responsecls )
		return self.base_response
RequestType = RequestT[ResponseType]


class NeedDataEvent ( Event ):
	data: Opt[str] = None # one decoded line
	response: Opt[BaseResponse] = None

	def reset ( self ) -> NeedDataEvent:
		self.data = None
		self.response = None
		return self

	def go ( self ) -> Iterator[Event]:
		self.reset()
		yield from super().go()


class SendDataEvent ( Event ):

	def __init__ ( self, *chunks: bytes ) -> None:
		self.chunks: Seq[bytes] = chunks

	def __repr__ ( self ) -> str:
		cls = type ( self )
		return f'{cls.__module__}.{cls.__name__}(chunks={self.chunks!r})'


class ClientProtocol:
	request: Opt[BaseRequest] = None
	request_protocol: Opt[Generator[Event,None,None]] = None
	need_data: Opt[NeedDataEvent] = None

	def send ( self, request: BaseRequest ) -> Iterator[Event]:
		#log = logger.getChild ( 'ClientProtocol.send' )
		assert self.request is None, f'trying to send {request=} but not finished processing {self.request=}'
		self.request = request
		self.request_protocol = request._client_protocol ( self )
		yield from self._run_protocol()

	def receive_line ( self, line: str ) -> Iterator[Event]:
		#log = logger.getChild ( 'ClientProtocol.receive_line' )
		assert self.need_data, f'not expecting data at this time ({line!r})'
		self.need_data.data = line
		self.need_data = None
		yield from self._run_protocol()

	def abandon ( self ) -> Opt[BaseRequest]:
		request, self.request = self.request, None
		self.request_protocol = None
		self.need_data = None
		return request

	def _run_protocol ( self ) -> Iterator[Event]:
		log = logger.getChild ( 'ClientProtocol._run_protocol' )
		assert self.request is not None, f'invalid {self.request=}'
		assert self.request_protocol is not None, f'invalid {self.request_protocol=}'
		try:
			event = next ( self.request_protocol )
			while True:
				if isinstance ( event, NeedDataEvent ):
					self.need_data = event.reset()
					return
				yield event
				if event.exc is not None:
					exc, event.exc = event.exc, None
					event = self.request_protocol.throw ( exc )
				else:
					event = next ( self.request_protocol )
		except BaseResponse as response:
			request = self.abandon()
			if not response.is_success():
				raise
			assert isinstance ( request, BaseRequest )
			request.base_response = response
		except StopIteration:
			# client protocol *must* raise its response
			# if not, SyncClient._request() will block waiting for data that never arrives
			request = self.abandon()
			log.warning (
				f'INTERNAL ERROR:'
				f' {type(request).__module__}.{type(request).__name__}'
				f'._client_protocol() exit w/o response - this can cause upstack deadlock'
			)
			raise Closed ( 'INTERNAL ERROR - CLIENT PROTOCOLS MUST THROW THEIR RESPONSE' )
		except Error:
			self.abandon()
			raise
		except Exception as e:
			self.abandon()
			log.exception ( 'internal protocol error:' )
			raise Closed ( repr ( e ) ) from e

#region client protocol helpers

def unstuff ( line: str ) -> str:
	# exactly one leading marker is removed, the terminator itself never gets here
	if line.startswith ( TERMINATOR ):
		return line[1:]
	return line


class ClientUtil:
	def __init__ ( self,
		parser: Callable[[str],BaseResponse],
	) -> None:
		self.parser = parser

	def send ( self, line: str ) -> Iterator[Event]:
		assert line.endswith ( '\r\n' ), f'invalid {line=}'
		yield from SendDataEvent ( s2b ( line, 'utf-8' ) ).go()

	def recv_ok ( self, event: Opt[NeedDataEvent] = None ) -> Iterator[Event]:
		if event is None:
			event = NeedDataEvent()
		yield from event.reset().go()
		assert event.data is not None
		event.response = response = self.parser ( event.data )
		if not response.is_success():
			raise response

	def recv_done ( self ) -> Iterator[Event]:
		yield from ( event := NeedDataEvent() ).go()
		assert event.data is not None
		raise self.parser ( event.data )

	def recv_multi ( self, lines: List[str] ) -> Iterator[Event]:
		event = NeedDataEvent()
		while True:
			yield from event.go()
			assert event.data is not None
			if event.data == TERMINATOR:
				return
			lines.append ( unstuff ( event.data ) )

	def send_recv_ok ( self, line: str, event: Opt[NeedDataEvent] = None ) -> Iterator[Event]:
		yield from self.send ( line )
		yield from self.recv_ok ( event )

	def send_recv_done ( self, line: str ) -> Iterator[Event]:
		yield from self.send ( line )
		yield from self.recv_done()

#endregion client protocol helpers
