#Import all the transform passes
from .typed_tree import TypedTreePass
from .const_fold import ConstFoldPass
from .reposition import RepositionPass
