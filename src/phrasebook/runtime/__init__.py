from .safe_string import SafeString
from .context import HtmlContext, TranslationContext
from .translate import translate, load_translations, TranslationNotFoundError
