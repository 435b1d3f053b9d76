from .context import EmitContext
from .expression import emit_expression, ExpressionEmitter
from .translation import EmitTranslationPass, EmittedTranslation, emit_text_expression
from .module import translation_module, translations_module
