from thebus.agents.narration import expand_headsign, group_times_by_route, translate
from thebus.domain import ArrivalFeed, ArrivalRecord, CancellationState


def _arrival(route="1", headsign="UH Manoa", time="9:35am", gps=True, state=CancellationState.NOT_CANCELED):
    return ArrivalRecord(route=route, headsign=headsign, stop_time=time, is_estimated_by_gps=gps, cancellation_state=state)


def test_missing_arrivals_uses_feed_stop():
    result = translate(ArrivalFeed(stop="9999", arrivals=None))
    assert result.speech == "Sorry, no arrivals found for stop 9999. Are you sure this is a valid stop?"
    assert result.card == result.speech


def test_single_gps_arrival(uh_manoa_feed):
    result = translate(uh_manoa_feed)
    assert result.speech == (
        "Here are the arrivals for bus stop 214.\n"
        "Route 1 heading to University of Hawaii Manoa arriving at 9:35am estimated by GPS.\n"
    )
    assert result.card == result.speech


def test_schedule_only_and_no_longer_canceled():
    feed = ArrivalFeed(stop="214", arrivals=(
        _arrival(route="4", headsign="Kapahulu", time="10:02am", gps=False),
        _arrival(route="6", headsign="Ala Moana", time="10:10am", state=CancellationState.NO_LONGER_CANCELED),
    ))
    lines = translate(feed).speech.splitlines()
    assert lines[1] == "Route 4 heading to Kapahulu arriving at 10:02am based on the schedule."
    assert lines[2] == (
        "Route 6 heading to Ala Moana arriving at 10:10am estimated by GPS, "
        "previously canceled but no longer canceled."
    )


def test_canceled_records_are_skipped_and_order_kept():
    feed = ArrivalFeed(stop="214", arrivals=(
        _arrival(route="13", time="10:30am"),
        _arrival(route="1", time="9:00am", state=CancellationState.CANCELED),
        _arrival(route="2", time="9:45am"),
    ))
    speech = translate(feed).speech
    assert "Route 1 " not in speech
    assert speech.index("Route 13") < speech.index("Route 2")
    assert "Sorry" not in speech


def test_only_canceled_fallback_appears_once():
    for count in (1, 10):
        feed = ArrivalFeed(stop="214", arrivals=tuple(
            _arrival(state=CancellationState.CANCELED) for _ in range(count)
        ))
        speech = translate(feed).speech
        assert speech.endswith("Sorry, only canceled arrivals were found.\n")
        assert speech.count("Sorry, only canceled arrivals were found.") == 1


def test_empty_arrivals_fallback():
    speech = translate(ArrivalFeed(stop="214", arrivals=())).speech
    assert speech == "Here are the arrivals for bus stop 214.\nSorry, no arrivals were returned.\n"


def test_every_sentence_ends_with_newline():
    feed = ArrivalFeed(stop="214", arrivals=(_arrival(), _arrival(route="2")))
    speech = translate(feed).speech
    assert all(line.endswith(".") for line in speech.splitlines())
    assert speech.endswith("\n")


def test_expand_headsign():
    assert expand_headsign("UH Manoa") == "University of Hawaii Manoa"
    assert expand_headsign("Kapahulu") == "Kapahulu"
    # whole words only
    assert expand_headsign("UHAUL Yard") == "UHAUL Yard"


def test_route_times_capped_and_local():
    arrivals = tuple(_arrival(route="1", time=f"{h}:00am") for h in range(1, 8)) + (_arrival(route="2", time="noon"),)
    grouped = group_times_by_route(arrivals)
    assert grouped["1"] == ("1:00am", "2:00am", "3:00am", "4:00am", "5:00am")
    assert grouped["2"] == ("noon",)

    first = translate(ArrivalFeed(stop="214", arrivals=arrivals))
    second = translate(ArrivalFeed(stop="215", arrivals=(_arrival(route="9", time="1:00pm"),)))
    assert set(first.route_times) == {"1", "2"}
    assert dict(second.route_times) == {"9": ("1:00pm",)}


def test_route_times_do_not_change_speech(uh_manoa_feed):
    assert translate(uh_manoa_feed).speech == translate(uh_manoa_feed).speech
