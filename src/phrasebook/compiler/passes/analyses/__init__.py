# Import all the analysis passes and their corresponding Analysis Object (if exists)
from .type_inference import TypeInferencePass
from .constraints import DeadCodeAnalysis, LiveRules
from .allowed_symbols import AllowedSymbolsPass, UsedSymbols
from .printer import TreePrinterPass, PrintedTree
