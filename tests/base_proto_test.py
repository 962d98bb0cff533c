# python imports:
import contextlib
import logging
from pathlib import Path
import sys
from typing import Iterator, List
import unittest

if __name__=='__main__': # pragma: no cover
	sys.path.append ( str ( Path ( __file__ ).parent.parent.absolute() ) )

# pop3 imports:
import base_proto
import pop3_proto

logger = logging.getLogger ( __name__ )

@contextlib.contextmanager
def quiet_logging ( quiet: bool = True ) -> Iterator[None]:
	try:
		if quiet:
			logging.disable ( logging.CRITICAL )
		yield None
	finally:
		if quiet:
			logging.disable ( logging.NOTSET )


def IsSendData ( evt: base_proto.Event ) -> base_proto.SendDataEvent:
	assert isinstance ( evt, base_proto.SendDataEvent )
	return evt


class MultiRequest ( base_proto.RequestT[pop3_proto.MultiResponse] ):
	responsecls = pop3_proto.MultiResponse
	
	def _client_protocol ( self, client: base_proto.ClientProtocol ) -> base_proto.RequestProtocolGenerator:
		event = base_proto.NeedDataEvent()
		yield from pop3_proto.client_util.send_recv_ok ( 'MULTI\r\n', event )
		assert isinstance ( event.response, pop3_proto.Response )
		lines: List[str] = []
		yield from pop3_proto.client_util.recv_multi ( lines )
		raise pop3_proto.MultiResponse.from_status ( event.response, lines )


def feed ( cp: base_proto.ClientProtocol, *lines: str ) -> None:
	for line in lines:
		assert list ( cp.receive_line ( line ) ) == []


class Tests ( unittest.TestCase ):
	def test_abstract ( self ) -> None:
		test = self
		
		class BadResponse ( base_proto.BaseResponse ):
			def is_success ( self ) -> bool:
				return super().is_success()
		bad1 = BadResponse()
		with test.assertRaises ( NotImplementedError ):
			bad1.is_success()
		
		class BadRequest ( base_proto.BaseRequest ):
			def _client_protocol ( self, client: base_proto.ClientProtocol ) -> base_proto.RequestProtocolGenerator:
				return super()._client_protocol ( client )
		bad2 = BadRequest()
		with test.assertRaises ( NotImplementedError ):
			bad2._client_protocol ( base_proto.ClientProtocol() )
	
	def test_errors ( self ) -> None:
		self.assertEqual ( str ( base_proto.Closed() ), '(none given)' )
		self.assertIsInstance ( base_proto.Closed(), base_proto.TransportError )
		e = base_proto.ParseError ( 'message count' )
		self.assertEqual ( str ( e ), 'missing message count' )
		self.assertEqual ( e.field, 'message count' )
		e = base_proto.ParseError ( 'message size', 'x12' )
		self.assertEqual ( str ( e ), "invalid message size: 'x12'" )
		self.assertEqual ( e.value, 'x12' )
		for cls in (
			base_proto.TransportError, base_proto.BufferExceeded,
			base_proto.DecodeError, base_proto.ProtocolError, base_proto.ParseError,
		):
			self.assertTrue ( issubclass ( cls, base_proto.Error ), cls )
	
	def test_unstuff ( self ) -> None:
		self.assertEqual ( base_proto.unstuff ( '..text' ), '.text' )
		self.assertEqual ( base_proto.unstuff ( '.text' ), 'text' )
		self.assertEqual ( base_proto.unstuff ( '..' ), '.' )
		self.assertEqual ( base_proto.unstuff ( 'text.' ), 'text.' )
		self.assertEqual ( base_proto.unstuff ( '' ), '' )
	
	def test_multi_line ( self ) -> None:
		cp = base_proto.ClientProtocol()
		request = MultiRequest()
		evts = [ b''.join ( IsSendData ( evt ).chunks ) for evt in cp.send ( request ) ]
		self.assertEqual ( evts, [ b'MULTI\r\n' ] )
		self.assertIsNotNone ( cp.need_data )
		feed ( cp, '+OK here it comes', 'Hello', '..dot', '.x', '', '..' )
		self.assertIsNone ( request.base_response )
		feed ( cp, '.' )
		r = request.response
		self.assertEqual ( r.message, 'here it comes' )
		self.assertEqual ( r.lines, ( 'Hello', '.dot', 'x', '', '.' ) )
		self.assertIsNone ( cp.request )
		self.assertIsNone ( cp.need_data )
	
	def test_multi_line_error ( self ) -> None:
		cp = base_proto.ClientProtocol()
		request = MultiRequest()
		list ( cp.send ( request ) )
		with self.assertRaises ( pop3_proto.ErrorResponse ) as cm:
			list ( cp.receive_line ( '-ERR no such message' ) )
		self.assertEqual ( str ( cm.exception ), 'no such message' )
		self.assertIsNone ( cp.request )
		self.assertIsNone ( request.base_response )
	
	def test_one_request_at_a_time ( self ) -> None:
		cp = base_proto.ClientProtocol()
		list ( cp.send ( MultiRequest() ) )
		with self.assertRaises ( AssertionError ):
			list ( cp.send ( MultiRequest() ) )
		cp.abandon()
		list ( cp.send ( MultiRequest() ) )
	
	def test_send_failure ( self ) -> None:
		cp = base_proto.ClientProtocol()
		gen = cp.send ( MultiRequest() )
		evt = next ( gen )
		evt.exc = base_proto.TransportError ( 'broken pipe' )
		with self.assertRaises ( base_proto.TransportError ):
			list ( gen )
		self.assertIsNone ( cp.request )
	
	def test_missing_response ( self ) -> None:
		class InvalidRequest ( base_proto.BaseRequest ):
			def _client_protocol ( self, client: base_proto.ClientProtocol ) -> base_proto.RequestProtocolGenerator:
				yield from () # this will trigger internal protocol error below
		cp = base_proto.ClientProtocol()
		with self.assertRaises ( base_proto.Closed ) as cm:
			with quiet_logging():
				list ( cp.send ( InvalidRequest() ) )
		self.assertEqual ( repr ( cm.exception ), "Closed('INTERNAL ERROR - CLIENT PROTOCOLS MUST THROW THEIR RESPONSE')" )
		self.assertIsNone ( cp.request )
	
	def test_internal_error ( self ) -> None:
		class CrashingRequest ( base_proto.BaseRequest ):
			def _client_protocol ( self, client: base_proto.ClientProtocol ) -> base_proto.RequestProtocolGenerator:
				yield from ()
				raise KeyError ( 'oops' )
		cp = base_proto.ClientProtocol()
		with self.assertRaises ( base_proto.Closed ) as cm:
			with quiet_logging():
				list ( cp.send ( CrashingRequest() ) )
		self.assertIsInstance ( cm.exception.__cause__, KeyError )

if __name__ == '__main__':
	logging.basicConfig ( level = logging.DEBUG )
	unittest.main()
