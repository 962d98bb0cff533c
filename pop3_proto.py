#region PROLOGUE --------------------------------------------------------------
from __future__ import annotations

# python imports:
from abc import abstractmethod
import logging
import re
from typing import (
	List, NamedTuple, Sequence as Seq, Type, TypeVar, Union,
)

# pop3 imports:
from base_proto import (
	BaseResponse, ResponseType, RequestT, NeedDataEvent, ClientProtocol,
	ClientUtil, ProtocolError, ParseError, RequestProtocolGenerator,
)

logger = logging.getLogger ( __name__ )


_r_uint = re.compile ( r'[0-9]+' )


def parse_uint ( field: str, fields: Seq[str], index: int ) -> int:
	if index >= len ( fields ):
		raise ParseError ( field )
	value = fields[index]
	if not _r_uint.fullmatch ( value ):
		raise ParseError ( field, value )
	return int ( value )


def parse_token ( field: str, fields: Seq[str], index: int ) -> str:
	if index >= len ( fields ):
		raise ParseError ( field )
	return fields[index]


#endregion
#region RECORDS ---------------------------------------------------------------

class MaildropStat ( NamedTuple ):
	message_count: int
	maildrop_size: int # octets


class MessageInfo ( NamedTuple ):
	message_id: int
	message_size: int # octets


class MessageUidInfo ( NamedTuple ):
	message_id: int
	unique_id: str


#endregion
#region RESPONSES -------------------------------------------------------------

class Response ( BaseResponse ):
	def __init__ ( self, ok: bool, message: str ) -> None:
		self.ok = ok
		self.message = message
		super().__init__ ( message )

	@staticmethod
	def parse ( line: str ) -> Union[SuccessResponse,ErrorResponse]:
		'''
		classify a status line: "+OK" is the only positive prefix, anything
		else is an error whose message is the text after "-ERR" (or the
		whole line if the server didn't use "-ERR")
		'''
		if line.startswith ( '+OK' ):
			return SuccessResponse ( line[3:].strip() )
		if line.startswith ( '-ERR' ):
			return ErrorResponse ( line[4:].strip() )
		return ErrorResponse ( line.strip() )

	def __repr__ ( self ) -> str:
		cls = type ( self )
		return f'{cls.__module__}.{cls.__name__}({self.ok!r}, {self.message!r})'


class SuccessResponse ( Response ):
	def __init__ ( self, message: str ) -> None:
		super().__init__ ( True, message )
	def is_success ( self ) -> bool:
		return True


class ErrorResponse ( Response, ProtocolError ):
	def __init__ ( self, message: str ) -> None:
		super().__init__ ( False, message )
	def is_success ( self ) -> bool:
		return False


MultiResponseType = TypeVar ( 'MultiResponseType', bound = 'MultiResponse' )
class MultiResponse ( SuccessResponse ):
	def __init__ ( self, message: str, *lines: str ) -> None:
		self.lines = lines
		super().__init__ ( message )

	@classmethod
	def from_status ( cls: Type[MultiResponseType], status: Response, lines: Seq[str] ) -> MultiResponseType:
		return cls ( status.message, *lines )

	def __repr__ ( self ) -> str:
		cls = type ( self )
		return f'{cls.__module__}.{cls.__name__}({self.ok!r}, {self.message!r}, {", ".join(map(repr,self.lines))})'


class StatResponse ( SuccessResponse ):
	stat: MaildropStat

	def __repr__ ( self ) -> str:
		cls = type ( self )
		return f'{cls.__module__}.{cls.__name__}({self.ok!r}, {self.message!r}, {self.stat!r})'


class ListResponse ( MultiResponse ):
	messages: List[MessageInfo]


class ListOneResponse ( SuccessResponse ):
	info: MessageInfo


class UidlResponse ( MultiResponse ):
	messages: List[MessageUidInfo]


class UidlOneResponse ( SuccessResponse ):
	info: MessageUidInfo


client_util = ClientUtil ( Response.parse )

#endregion
#region REQUESTS --------------------------------------------------------------

class Request ( RequestT[ResponseType] ):
	def _client_protocol ( self, client: ClientProtocol ) -> RequestProtocolGenerator:
		assert isinstance ( client, Client )
		yield from self.client_protocol ( client )

	@abstractmethod
	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		cls = self.__class__
		raise NotImplementedError ( f'{cls.__module__}.{cls.__name__}.client_protocol()' )


def _check_arg ( arg: str ) -> str:
	assert arg and not re.search ( r'[\r\n]', arg ), f'invalid {arg=}'
	return arg


class GreetingRequest ( Request[SuccessResponse] ):
	responsecls = SuccessResponse

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		#log = logger.getChild ( 'GreetingRequest.client_protocol' )
		yield from client_util.recv_done()


class UserPassRequest ( Request[SuccessResponse] ):
	responsecls = SuccessResponse

	def __init__ ( self, uid: str, pwd: str ) -> None:
		self.uid = _check_arg ( str ( uid ) )
		self.pwd = _check_arg ( str ( pwd ) )

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		yield from client_util.send_recv_ok ( f'USER {self.uid}\r\n' )
		yield from client_util.send_recv_done ( f'PASS {self.pwd}\r\n' )

	def __repr__ ( self ) -> str:
		cls = type ( self )
		return f'{cls.__module__}.{cls.__name__}(uid={self.uid!r})'


class StatRequest ( Request[StatResponse] ):
	responsecls = StatResponse

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		event = NeedDataEvent()
		yield from client_util.send_recv_ok ( 'STAT\r\n', event )
		assert isinstance ( event.response, Response )
		fields = event.response.message.split ( ' ' )
		r = StatResponse ( event.response.message )
		r.stat = MaildropStat (
			parse_uint ( 'message count', fields, 0 ),
			parse_uint ( 'maildrop size', fields, 1 ),
		)
		raise r


class ListRequest ( Request[ListResponse] ):
	responsecls = ListResponse

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		event = NeedDataEvent()
		yield from client_util.send_recv_ok ( 'LIST\r\n', event )
		assert isinstance ( event.response, Response )
		lines: List[str] = []
		yield from client_util.recv_multi ( lines )
		r = ListResponse.from_status ( event.response, lines )
		r.messages = []
		for line in lines:
			fields = line.split ( ' ' )
			r.messages.append ( MessageInfo (
				parse_uint ( 'message id', fields, 0 ),
				parse_uint ( 'message size', fields, 1 ),
			) )
		raise r


class ListOneRequest ( Request[ListOneResponse] ):
	responsecls = ListOneResponse

	def __init__ ( self, message_id: int ) -> None:
		assert isinstance ( message_id, int ) and message_id >= 0, f'invalid {message_id=}'
		self.message_id = message_id

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		event = NeedDataEvent()
		yield from client_util.send_recv_ok ( f'LIST {self.message_id}\r\n', event )
		assert isinstance ( event.response, Response )
		fields = event.response.message.split ( ' ' )
		r = ListOneResponse ( event.response.message )
		r.info = MessageInfo (
			parse_uint ( 'message id', fields, 0 ),
			parse_uint ( 'message size', fields, 1 ),
		)
		raise r


class RetrRequest ( Request[MultiResponse] ):
	responsecls = MultiResponse
	_verb = 'RETR'

	def __init__ ( self, message_id: int ) -> None:
		assert isinstance ( message_id, int ) and message_id >= 0, f'invalid {message_id=}'
		self.message_id = message_id

	def command ( self ) -> str:
		return f'{self._verb} {self.message_id}\r\n'

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		event = NeedDataEvent()
		yield from client_util.send_recv_ok ( self.command(), event )
		assert isinstance ( event.response, Response )
		lines: List[str] = []
		yield from client_util.recv_multi ( lines )
		raise MultiResponse.from_status ( event.response, lines )


class TopRequest ( RetrRequest ):
	_verb = 'TOP'

	def __init__ ( self, message_id: int, line_count: int ) -> None:
		assert isinstance ( line_count, int ) and line_count >= 0, f'invalid {line_count=}'
		super().__init__ ( message_id )
		self.line_count = line_count

	def command ( self ) -> str:
		return f'{self._verb} {self.message_id} {self.line_count}\r\n'


class DeleRequest ( Request[SuccessResponse] ):
	responsecls = SuccessResponse

	def __init__ ( self, message_id: int ) -> None:
		assert isinstance ( message_id, int ) and message_id >= 0, f'invalid {message_id=}'
		self.message_id = message_id

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		yield from client_util.send_recv_done ( f'DELE {self.message_id}\r\n' )


class UidlRequest ( Request[UidlResponse] ):
	responsecls = UidlResponse

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		event = NeedDataEvent()
		yield from client_util.send_recv_ok ( 'UIDL\r\n', event )
		assert isinstance ( event.response, Response )
		lines: List[str] = []
		yield from client_util.recv_multi ( lines )
		r = UidlResponse.from_status ( event.response, lines )
		r.messages = []
		for line in lines:
			fields = line.split ( ' ' )
			r.messages.append ( MessageUidInfo (
				parse_uint ( 'message id', fields, 0 ),
				parse_token ( 'unique id', fields, 1 ),
			) )
		raise r


class UidlOneRequest ( Request[UidlOneResponse] ):
	responsecls = UidlOneResponse

	def __init__ ( self, message_id: int ) -> None:
		assert isinstance ( message_id, int ) and message_id >= 0, f'invalid {message_id=}'
		self.message_id = message_id

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		event = NeedDataEvent()
		yield from client_util.send_recv_ok ( f'UIDL {self.message_id}\r\n', event )
		assert isinstance ( event.response, Response )
		fields = event.response.message.split ( ' ' )
		r = UidlOneResponse ( event.response.message )
		r.info = MessageUidInfo (
			parse_uint ( 'message id', fields, 0 ),
			parse_token ( 'unique id', fields, 1 ),
		)
		raise r


class RsetRequest ( Request[SuccessResponse] ):
	responsecls = SuccessResponse

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		yield from client_util.send_recv_done ( 'RSET\r\n' )


class NoOpRequest ( Request[SuccessResponse] ):
	responsecls = SuccessResponse

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		yield from client_util.send_recv_done ( 'NOOP\r\n' )


class QuitRequest ( Request[SuccessResponse] ):
	responsecls = SuccessResponse

	def client_protocol ( self, client: Client ) -> RequestProtocolGenerator:
		#log = logger.getChild ( 'QuitRequest.client_protocol' )
		yield from client_util.send_recv_done ( 'QUIT\r\n' )

#endregion
#region CLIENT ----------------------------------------------------------------

class Client ( ClientProtocol ):
	pass

#endregion
