import ast
import logging

from phrasebook import (
    TextRoot, Literal, TextVar, TextExpr, Var, Number, Mul, Call,
    RuleSet, Rule, ConstraintRoot, Equality, Inequality, Ignore, Ident, NumberValue, GenderValue,
    compile_translations, load_translations, translate, HtmlContext,
)

logging.basicConfig(level=logging.INFO)


def n_is(op, value):
    cls = Equality if op in ("=", "!=") else Inequality
    return cls(Ident(name="n"), NumberValue(value=value), op=op)


##############################
# A constrained translation  #
##############################
# n=0: You have no items
# n=1: You have one item
# n>1: You have $n items
items = RuleSet(
    Rule(ConstraintRoot(n_is("=", 0)), TextRoot(Literal(value="You have no items"))),
    Rule(ConstraintRoot(n_is("=", 1)), TextRoot(Literal(value="You have one item"))),
    Rule(ConstraintRoot(n_is(">", 1)), TextRoot(Literal(value="You have "), TextVar(name="n"), Literal(value=" items"))),
)

###########################################
# Gendered greeting with a catch-all rule #
###########################################
# g=F: Welcome, Mrs. $name
# !g:  Welcome, {{title($name)}}
greeting = RuleSet(
    Rule(
        ConstraintRoot(Equality(Ident(name="g"), GenderValue(value="F"), op="=")),
        TextRoot(Literal(value="Welcome, Mrs. "), TextVar(name="name")),
    ),
    Rule(
        ConstraintRoot(Ignore(Ident(name="g"))),
        TextRoot(Literal(value="Welcome, "), TextExpr(Call(Var(name="name"), name="title"))),
    ),
)

###############################
# Folded away at compile time #
###############################
# Here's one million: {{1*1000*1000}}
million = TextRoot(
    Literal(value="Here's one million: "),
    TextExpr(Mul(Mul(Number(value=1), Number(value=1000)), Number(value=1000))),
)

module = compile_translations({"items": items, "greeting": greeting, "million": million}, verbose=True)
print(ast.unparse(module))

translations = load_translations(module)
ctx = HtmlContext()
fns = {"title": lambda c, name: c.make_safe_string(f"<em>{c.encode(name)}</em>")}
for n in (0, 1, 7):
    print(translate(translations, "items", {"n": n}, fns, ctx))
print(translate(translations, "greeting", {"g": "F", "name": "Ada"}, fns, ctx))
print(translate(translations, "greeting", {"g": "M", "name": "<Bob>"}, fns, ctx))
print(translate(translations, "million", {}, fns, ctx))
