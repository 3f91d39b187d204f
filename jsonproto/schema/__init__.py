"""Schema definition language and runtime descriptors.

The descriptor pool lives in jsonproto.schema.pool; it depends on the message
runtime and is not re-exported here.
"""

from .descriptors import EnumDescriptor as EnumDescriptor
from .descriptors import EnumValueDescriptor as EnumValueDescriptor
from .descriptors import FieldDescriptor as FieldDescriptor
from .descriptors import MessageDescriptor as MessageDescriptor
from .descriptors import SemanticType as SemanticType
from .extensions import ExtensionInfo as ExtensionInfo
from .extensions import ExtensionRegistry as ExtensionRegistry
from .parser import *
from .types import *
