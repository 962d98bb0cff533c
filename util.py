from typing import Union

import packaging.version

__version__ = packaging.version.parse ( '0.1.0' )

BYTES = Union[bytes,bytearray,memoryview]

def b2s ( b: BYTES, encoding: str = 'us-ascii', errors: str = 'strict' ) -> str:
	return bytes ( b ).decode ( encoding, errors )

def s2b ( s: str, encoding: str = 'us-ascii', errors: str = 'strict' ) -> bytes:
	return s.encode ( encoding, errors )
