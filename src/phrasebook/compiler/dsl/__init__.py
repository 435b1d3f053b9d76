from .ir_types import InferredType
from .type_map import TypeMap, TypeInfo, CustomUsage
