import pytest

from lifehook.callsite import (
    Frame,
    Stack,
    caller,
    caller_stack,
    func_name,
    sanitize,
    should_ignore_frame,
)


def some_func():
    pass


def test_caller():
    assert caller() == f"{__name__}.test_caller"


def test_func_name_of_function():
    assert func_name(some_func) == f"{__name__}.some_func()"


def test_func_name_of_non_function():
    assert func_name(42) == "42"


@pytest.mark.parametrize(
    "given, expected",
    [
        ("go.uber.org/fx/sample%2egit/someFunc", "go.uber.org/fx/sample.git/someFunc"),
        (
            "go.uber.org/fx/vendor/github.com/some/lib.SomeFunc",
            "vendor/github.com/some/lib.SomeFunc",
        ),
        ("go.uber.org/fx/foovendor/someFunc", "go.uber.org/fx/foovendor/someFunc"),
    ],
    ids=["url encoding", "vendor removal", "package named vendor untouched"],
)
def test_sanitize(given, expected):
    assert sanitize(given) == expected


def test_sanitize_leaves_bad_escape():
    assert sanitize("pkg/bad%zzname") == "pkg/bad%zzname"


def test_caller_stack_default():
    frames = caller_stack(0, 0)
    assert frames
    first = frames[0]
    assert first.function == f"{__name__}.test_caller_stack_default"
    assert first.file.endswith("test_callsite.py")
    assert first.line > 0


def test_caller_stack_deeper():
    def outer():
        def inner():
            return caller_stack(0, 0)

        return inner()

    frames = outer()
    assert len(frames) > 3
    prefix = f"{__name__}.test_caller_stack_deeper"
    expected = [f"{prefix}.<locals>.outer.<locals>.inner", f"{prefix}.<locals>.outer", prefix]
    assert [f.function for f in frames[:3]] == expected
    assert all(f.file.endswith("test_callsite.py") for f in frames[:3])
    assert all(f.line > 0 for f in frames[:3])


def test_caller_stack_skip():
    def outer():
        def inner():
            return caller_stack(2, 0)

        return inner()

    frames = outer()
    assert frames
    assert frames[0].function == f"{__name__}.test_caller_stack_skip"


def test_caller_stack_depth_limit():
    assert len(caller_stack(0, 2)) == 2


@pytest.mark.parametrize(
    "stack, expected",
    [
        (Stack(), "n/a"),
        (
            Stack(
                [
                    Frame(function="lifehook.Foo()", file="lifehook/foo.py"),
                    Frame(function="foo/bar.Baz()", file="foo/bar/baz.py"),
                ]
            ),
            "foo/bar.Baz()",
        ),
        (
            Stack(
                [
                    Frame(function="lifehook.Foo()", file="elsewhere/foo.py"),
                    Frame(function="foo/bar.Baz()", file="foo/bar/baz.py"),
                ]
            ),
            "foo/bar.Baz()",
        ),
        (
            Stack(
                [
                    Frame(function="lifehook.callsite.Foo()", file="lifehook/callsite.py"),
                    Frame(function="foo/bar.Baz()", file="foo/bar/baz.py"),
                ]
            ),
            "foo/bar.Baz()",
        ),
        (
            Stack([Frame(function="some/thing.Foo()", file="lifehook/test_foo.py")]),
            "some/thing.Foo()",
        ),
        (
            Stack([Frame(function="lifehookfoo.Bar()", file="lifehookfoo/bar.py")]),
            "lifehookfoo.Bar()",
        ),
    ],
    ids=[
        "empty",
        "skip package components",
        "skip package in wrong directory",
        "skip subpackage",
        "keep tests",
        "keep name with package prefix",
    ],
)
def test_stack_caller_name(stack, expected):
    assert stack.caller_name() == expected


def test_test_files_are_not_ignored():
    assert should_ignore_frame(Frame(function="lifehook.Foo()", file="tests/test_foo.py")) is False
    assert should_ignore_frame(Frame(function="lifehook.Foo()", file="lifehook/foo.py")) is True


@pytest.mark.parametrize(
    "frame, expected",
    [
        (Frame(), "unknown"),
        (Frame(file="foo.py", line=42), "(foo.py:42)"),
        (Frame(file="foo.py"), "(foo.py)"),
        (Frame(function="foo"), "foo"),
        (Frame(function="foo", file="bar.py"), "foo (bar.py)"),
        (Frame(function="foo", line=42), "foo"),
        (Frame(function="foo", file="bar.py", line=42), "foo (bar.py:42)"),
    ],
)
def test_frame_string(frame, expected):
    assert str(frame) == expected


@pytest.fixture
def sample_stack():
    return Stack(
        [
            Frame(function="path/to/module.SomeFunction()", file="path/to/file.py", line=42),
            Frame(
                function="path/to/another/module.AnotherFunction()",
                file="path/to/another/file.py",
                line=12,
            ),
        ]
    )


def test_stack_single_line(sample_stack):
    assert str(sample_stack) == (
        "path/to/module.SomeFunction() (path/to/file.py:42); "
        "path/to/another/module.AnotherFunction() (path/to/another/file.py:12)"
    )


def test_stack_multi_line(sample_stack):
    expected = (
        "path/to/module.SomeFunction()\n"
        "\tpath/to/file.py:42\n"
        "path/to/another/module.AnotherFunction()\n"
        "\tpath/to/another/file.py:12\n"
    )
    assert sample_stack.format_multiline() == expected
    assert f"{sample_stack:+}" == expected


def test_stack_strings(sample_stack):
    assert sample_stack.strings() == [
        "path/to/module.SomeFunction() (path/to/file.py:42)",
        "path/to/another/module.AnotherFunction() (path/to/another/file.py:12)",
    ]