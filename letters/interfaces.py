# ============================================================================
# letters/interfaces.py - Contracts of the pluggable parser functions
# ============================================================================

from datetime import datetime
from typing import Callable, List

from .models import Address, File

# Parses one decoded, non-empty header value into a single address.
AddressFunc = Callable[[str], Address]

# Parses one decoded, non-empty header value into a list of addresses.
AddressesFunc = Callable[[str], List[Address]]

# Parses one non-empty Date or Resent-Date header value.
DateFunc = Callable[[str], datetime]

# Consumes file.reader (the transfer-decoded payload) before returning; it
# may buffer the payload into file.data or stream it elsewhere. Any exception
# aborts the parse.
FileFunc = Callable[[File], None]
