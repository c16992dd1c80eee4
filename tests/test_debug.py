import pytest

from cubecore.console import Console, VgaColor
from cubecore.debug import (
    COM1,
    COM2,
    SEPARATOR_LENGTH,
    DebugLog,
    Level,
    format_number,
    kout,
)


def enabled_log(**kwargs):
    log = DebugLog(**kwargs)
    log.set_port(COM1)
    return log


def test_disabled_log_is_silent():
    log = DebugLog()
    log.message("hello", "iface", Level.ERROR)
    log.separator("title")
    log.breakpoint()
    assert log.text == ""
    assert log.breakpoints == 0


def test_message_format():
    log = enabled_log()
    log.message("hello", "iface", Level.ERROR)
    assert log.text == "\n\rDEBUG: [ ERROR   ][iface] hello"


def test_message_without_interface():
    log = enabled_log()
    log.message("hi", None, Level.OK)
    assert log.text == "\n\rDEBUG: [ OKAY    ]hi"


def test_message_none():
    log = enabled_log()
    log.message(None, "iface", Level.MESSAGE)
    assert log.text == "\n\rDEBUG: \n\r"


def test_verbose_filtering():
    log = enabled_log()
    log.message("quiet", None, Level.VERBOSE)
    assert log.text == ""
    log.set_verbose(True)
    assert "Verbose flag enabled" in log.text
    log.message("loud", None, Level.VERBOSE)
    assert log.text.endswith("[ VERBOSE ]loud")


def test_invalid_port():
    log = enabled_log()
    with pytest.raises(ValueError):
        log.set_port(0x1234)
    assert log.enabled is False


def test_port_zero_disables():
    log = enabled_log()
    log.set_port(0)
    log.append("x")
    assert log.enabled is False
    assert log.text == ""


def test_set_port_announces_on_console():
    console = Console()
    log = DebugLog(console=console)
    log.set_port(COM2)
    assert log.port == COM2
    assert console.row(0).startswith("Port COM2 used as a debug port.")


def test_separator():
    log = enabled_log()
    log.separator("KERNEL PANIC")
    assert log.text.startswith("DEBUG: << [ KERNEL PANIC ] >>\n\r")
    assert ("-" * SEPARATOR_LENGTH) + "\n\r" in log.text


def test_breakpoints_counted():
    log = enabled_log()
    log.breakpoint()
    log.breakpoint()
    assert log.breakpoints == 2
    assert "BREAKPOINT INSERTED: 0 " in log.text
    assert "BREAKPOINT INSERTED: 1 " in log.text


def test_number_hex_prefix():
    log = enabled_log()
    log.number(255, 16)
    assert log.text == "0xff"


def test_number_invalid_base():
    log = enabled_log()
    with pytest.raises(ValueError):
        log.number(10, 7)


@pytest.mark.parametrize("base", [2, 8, 10, 12, 16, 36])
@pytest.mark.parametrize("value", [0, 1, 35, 1000, 123456789])
def test_format_number_roundtrip(base, value):
    assert int(format_number(value, base), base) == value


def test_format_number_negative():
    assert int(format_number(-42, 10)) == -42
    assert int(format_number(-1, 16), 16) == 0xFFFFFFFF


def test_format_number_bad_base():
    with pytest.raises(ValueError):
        format_number(5, 1)


def test_message_number():
    log = enabled_log()
    log.message_number("value: ", "m", Level.MESSAGE, 200, 16)
    assert log.text.endswith("value: 0x" + format_number(200, 16))


def test_putc_ignores_enabled_flag():
    log = DebugLog()
    log.putc("z")
    assert log.text == "z"


def test_write_sink_receives_output():
    received = []
    log = enabled_log(write=received.append)
    log.append("abc")
    assert "".join(received) == log.text == "abc"


def test_kout_screen_and_log():
    console = Console()
    log = enabled_log()
    kout(console, log, Level.ERROR, "iface", "msg", "q")
    line = console.row(0).rstrip()
    assert line == "[ ERROR   ] @iface: msg q"
    assert console.buffer[0] >> 8 == Level.ERROR.color
    assert console.buffer[line.index("q")] >> 8 == VgaColor.WHITE
    assert log.text.endswith("[ ERROR   ][iface] msg q")


def test_kout_without_message_skips_screen():
    console = Console()
    log = enabled_log()
    kout(console, log, Level.WARNING, "iface", None, None)
    assert console.wherexy() == (0, 0)
    assert log.text == "\n\rDEBUG: \n\r"