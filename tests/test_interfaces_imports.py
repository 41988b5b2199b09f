def test_can_import_all_protocols():
    # Import must succeed and expose the expected names
    import stencil.core.interfaces as I

    assert hasattr(I, "FileSystemProtocol")
    assert hasattr(I, "LoggerFactoryProtocol")
    assert hasattr(I, "PredicateEvaluatorProtocol")
    assert hasattr(I, "TemplateEngineProtocol")


def test_core_reexports_public_surface():
    import stencil.core as core

    for name in core.__all__:
        assert hasattr(core, name), name
    assert core.steps(core.Print(message="x"))[0].action_name == "print"


def test_default_implementations_satisfy_protocols():
    from stencil.core.interfaces import FileSystemProtocol, PredicateEvaluatorProtocol, TemplateEngineProtocol
    from stencil.io.fs import ErrorFS, RealFS
    from stencil.rendering.predicates import LiteralPredicateEvaluator
    from stencil.rendering.template_engine import GoTemplateEngine

    assert isinstance(RealFS(), FileSystemProtocol)
    assert isinstance(ErrorFS(), FileSystemProtocol)
    assert isinstance(LiteralPredicateEvaluator(), PredicateEvaluatorProtocol)
    assert isinstance(GoTemplateEngine(), TemplateEngineProtocol)
