# python imports:
import logging

# pop3 imports:
from base_proto import BufferExceeded, DecodeError
from transport import SyncTransport
from util import b2s

logger = logging.getLogger ( __name__ )

BUFFER_SIZE = 512
EOL = 0x0a
ENCODING = 'utf-8'


class LineReader:
	'''
	Splits the byte stream of a blocking transport into lines.
	
	Bytes are accumulated in a fixed-size buffer. Whatever follows the
	end of the returned line stays buffered for the next call, so lines
	that arrive split across reads, or several lines that arrive in one
	read, come out the same as if each line had been read on its own.
	
	A line that does not fit in the buffer (terminator included) raises
	BufferExceeded.
	'''
	
	def __init__ ( self, capacity: int = BUFFER_SIZE ) -> None:
		assert capacity > 0, f'invalid {capacity=}'
		self._buf = bytearray ( capacity )
		self._view = memoryview ( self._buf )
		self._pos = 0 # end of the valid bytes in _buf
	
	@property
	def capacity ( self ) -> int:
		return len ( self._buf )
	
	@property
	def pending ( self ) -> int:
		return self._pos
	
	def _find_eol ( self ) -> int:
		return self._buf.find ( EOL, 0, self._pos )
	
	def read_line ( self, source: SyncTransport ) -> str:
		#log = logger.getChild ( 'LineReader.read_line' )
		while ( eol := self._find_eol() ) < 0:
			if self._pos >= len ( self._buf ):
				raise BufferExceeded ( f'no line terminator within {len(self._buf)} bytes' )
			self._pos += source.read_into ( self._view[self._pos:] )
		
		raw = bytes ( self._view[:eol] )
		start = eol + 1
		remaining = self._pos - start
		self._buf[:remaining] = self._buf[start:self._pos]
		self._pos = remaining
		
		try:
			return b2s ( raw, ENCODING ).strip()
		except UnicodeDecodeError as e:
			raise DecodeError ( f'line is not valid {ENCODING}: {raw!r}' ) from e
