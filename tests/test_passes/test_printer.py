from phrasebook.compiler.dsl import ir, ir_types as irT
from phrasebook.compiler.passes import Context, PassManager, analyses as A


def test_tree_printer():
    root = ir.TextRoot(
        ir.Literal(value="Hi ", T=irT.String),
        ir.TextExpr(
            ir.Mul(ir.Var(name="n", T=irT.Number, const=False), ir.Number(value=2, T=irT.Number, const=True), T=irT.Number, const=False),
            T=irT.Number,
        ),
    )
    ctx = Context()
    assert PassManager(A.TreePrinterPass()).run(root, ctx) is root
    assert ctx.get(A.PrintedTree).text == "\n".join([
        "TextRoot",
        "│   Literal[value='Hi ']: string",
        "│   TextExpr: number",
        "│   │   Mul: number",
        "│   │   │   Var[name='n']: number",
        "│   │   │   Number[value=2]: number const",
    ])
