from .main import *
from .signature import Signature, infer_signature
from .sizes import MAX_FILE_SIZE, FileTooLargeError, physical_size
from .bitmanip import InternalFormatError
