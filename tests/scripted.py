# python imports:
from typing import List, Optional as Opt

# pop3 imports:
from base_proto import Closed, TransportError
from transport import SyncTransport
from util import BYTES


class ScriptedTransport ( SyncTransport ):
	'''
	in-memory transport: each read_into() hands out (part of) the next
	scripted chunk, everything written is collected in `written`
	'''
	def __init__ ( self, *chunks: bytes ) -> None:
		self.chunks: List[bytes] = list ( chunks )
		self.written: List[bytes] = []
		self.reads = 0
		self.closed = 0
		self.write_error: Opt[Exception] = None
	
	def feed ( self, *chunks: bytes ) -> None:
		self.chunks.extend ( chunks )
	
	def read_into ( self, buf: memoryview ) -> int:
		self.reads += 1
		if not self.chunks:
			raise Closed ( 'EOF' )
		chunk = self.chunks.pop ( 0 )
		n = min ( len ( chunk ), len ( buf ) )
		buf[:n] = chunk[:n]
		if n < len ( chunk ):
			self.chunks.insert ( 0, chunk[n:] )
		return n
	
	def write ( self, data: BYTES ) -> None:
		if self.write_error is not None:
			raise self.write_error
		self.written.append ( bytes ( data ) )
	
	def close ( self ) -> None:
		self.closed += 1
	
	@property
	def commands ( self ) -> List[str]:
		return [ chunk.decode ( 'utf-8' ) for chunk in self.written ]


class BrokenTransport ( ScriptedTransport ):
	def read_into ( self, buf: memoryview ) -> int:
		raise TransportError ( 'connection reset' )
	
	def write ( self, data: BYTES ) -> None:
		raise TransportError ( 'connection reset' )
	
	def close ( self ) -> None:
		self.closed += 1
		raise TransportError ( 'already closed' )
