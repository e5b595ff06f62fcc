from createverse.utils.debounce import ScanDebouncer


def test_same_identifier_inside_window_is_dropped():
    debouncer = ScanDebouncer(window_ms=3000)
    assert debouncer.should_process('A1001', now=10.0) is True
    assert debouncer.should_process('A1001', now=10.5) is False


def test_same_identifier_after_window_passes():
    debouncer = ScanDebouncer(window_ms=3000)
    assert debouncer.should_process('A1001', now=10.0) is True
    assert debouncer.should_process('A1001', now=13.5) is True


def test_different_identifier_passes_immediately():
    debouncer = ScanDebouncer(window_ms=3000)
    assert debouncer.should_process('A1001', now=10.0) is True
    assert debouncer.should_process('B2002', now=10.01) is True


def test_dropped_repeat_does_not_extend_window():
    debouncer = ScanDebouncer(window_ms=3000)
    assert debouncer.should_process('A1001', now=0.0)
    assert not debouncer.should_process('A1001', now=2.0)
    assert not debouncer.should_process('A1001', now=2.9)
    # Measured from the accepted scan at 0.0, not the dropped ones
    assert debouncer.should_process('A1001', now=3.0)
    assert debouncer.last == ('A1001', 3.0)


def test_only_one_slot_is_remembered():
    debouncer = ScanDebouncer(window_ms=3000)
    assert debouncer.should_process('A1001', now=0.0)
    assert debouncer.should_process('B2002', now=0.1)
    # A1001 was forgotten when B2002 replaced it
    assert debouncer.should_process('A1001', now=0.2)


def test_reset_and_clock():
    ticks = iter([100.0, 100.1, 100.2])
    debouncer = ScanDebouncer(window_ms=3000, clock=lambda: next(ticks))
    assert debouncer.should_process('A1001')
    assert not debouncer.should_process('A1001')
    debouncer.reset()
    assert debouncer.should_process('A1001')


def test_independent_debouncers_do_not_share_state():
    camera = ScanDebouncer()
    desk = ScanDebouncer()
    assert camera.should_process('A1001', now=1.0)
    assert desk.should_process('A1001', now=1.0)
