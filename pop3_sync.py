from __future__ import annotations

# system imports:
import logging
from types import TracebackType
from typing import List, Optional as Opt, TextIO, Type

# pop3 imports:
from event_handling import SyncClient
import pop3_proto as proto

logger = logging.getLogger ( __name__ )


class Client ( SyncClient ):
	'''
	Blocking POP3 session.
	
	Every method sends one command and waits for its reply. A negative
	reply raises proto.ErrorResponse. After any error the session is in
	an unknown state and should normally just be closed.
	
	close() (or leaving a ``with`` block) sends QUIT once and closes the
	transport; it never raises.
	'''
	protocls = proto.Client
	_quit_sent: bool = False
	
	def __enter__ ( self ) -> Client:
		return self
	
	def __exit__ ( self,
		exc_type: Opt[Type[BaseException]],
		exc_value: Opt[BaseException],
		traceback: Opt[TracebackType],
	) -> None:
		self.close()
	
	def greeting ( self ) -> proto.SuccessResponse:
		return self._request ( proto.GreetingRequest() )
	
	def login ( self, user: str, password: str ) -> proto.SuccessResponse:
		return self._request ( proto.UserPassRequest ( user, password ) )
	
	def stat ( self ) -> proto.MaildropStat:
		return self._request ( proto.StatRequest() ).stat
	
	def list ( self ) -> List[proto.MessageInfo]:
		return self._request ( proto.ListRequest() ).messages
	
	def get_message_size ( self, message_id: int ) -> int:
		return self._request ( proto.ListOneRequest ( message_id ) ).info.message_size
	
	def retrieve ( self, message_id: int, sink: TextIO ) -> None:
		r = self._request ( proto.RetrRequest ( message_id ) )
		for line in r.lines:
			sink.write ( line )
			sink.write ( '\n' )
	
	def delete ( self, message_id: int ) -> proto.SuccessResponse:
		return self._request ( proto.DeleRequest ( message_id ) )
	
	def reset ( self ) -> proto.SuccessResponse:
		return self._request ( proto.RsetRequest() )
	
	def noop ( self ) -> proto.SuccessResponse:
		return self._request ( proto.NoOpRequest() )
	
	def top ( self, message_id: int, line_count: int ) -> str:
		r = self._request ( proto.TopRequest ( message_id, line_count ) )
		return ''.join ( f'{line}\n' for line in r.lines )
	
	def list_unique_ids ( self ) -> List[proto.MessageUidInfo]:
		return self._request ( proto.UidlRequest() ).messages
	
	def get_unique_id ( self, message_id: int ) -> str:
		return self._request ( proto.UidlOneRequest ( message_id ) ).info.unique_id
	
	def quit ( self ) -> proto.SuccessResponse:
		self._quit_sent = True
		return self._request ( proto.QuitRequest() )
	
	def close ( self ) -> None:
		log = logger.getChild ( 'Client.close' )
		try:
			if not self._quit_sent:
				self.quit()
		except Exception as e:
			log.debug ( f'ignoring error from QUIT: {e!r}' )
		finally:
			try:
				self.transport.close()
			except Exception as e:
				log.debug ( f'ignoring error closing transport: {e!r}' )
