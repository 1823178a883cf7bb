import pytest

from lifehook.writer import PrinterWriter, WriteSyncer


class LogSpy:
    def __init__(self):
        self.logs = []

    def logf(self, fmt, *args):
        self.logs.append(fmt % args if args else fmt)


class PrinterSpy:
    def __init__(self):
        self.calls = []

    def printf(self, fmt, *args):
        self.calls.append((fmt, args))


@pytest.fixture
def log_spy():
    return LogSpy()


def test_write_syncer_logs_text(log_spy):
    ws = WriteSyncer(t=log_spy)
    assert ws.write("hello") == 5
    assert log_spy.logs == ["hello"]


def test_write_syncer_logs_bytes(log_spy):
    ws = WriteSyncer(t=log_spy)
    assert ws.write(b"hello") == 5
    assert log_spy.logs == ["hello"]


def test_write_syncer_keeps_percent_signs(log_spy):
    ws = WriteSyncer(t=log_spy)
    ws.write("100% done %s")
    assert log_spy.logs == ["100% done %s"]


def test_write_syncer_sync_leaves_logs(log_spy):
    ws = WriteSyncer(t=log_spy)
    ws.write("a")
    ws.sync()
    assert log_spy.logs == ["a"]


def test_write_syncer_with_print(log_spy):
    print("hi", file=WriteSyncer(t=log_spy))
    assert "".join(log_spy.logs) == "hi\n"


def test_printer_writer_passes_text():
    printer = PrinterSpy()
    writer = PrinterWriter(p=printer)
    assert writer.write(b"line\n") == 5
    assert printer.calls == [("line\n", ())]
    assert writer.write("again") == 5
    assert printer.calls[-1] == ("again", ())