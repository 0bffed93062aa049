from datetime import date

from booking_engine.models.domain import AnchorSource, AppointmentStatus, GeoPoint, TimeSlot
from booking_engine.services.availability.anchor import resolve_anchor
from booking_engine.services.availability.policy import AnchorRule

DAY = date(2024, 6, 10)


def test_no_appointments_anchors_at_home(make_rep):
    rep = make_rep("carol", 32.84, -83.63)

    anchor = resolve_anchor(rep, DAY, TimeSlot.MIDDAY, [])

    assert anchor.source is AnchorSource.HOME
    assert anchor.location == rep.home_address.location


def test_prior_appointment_wins_over_next(make_rep, make_appointment):
    rep = make_rep("r1", 33.0, -84.0)
    morning = make_appointment("M", "r1", DAY, TimeSlot.MORNING, 33.5, -84.5)
    evening = make_appointment("E", "r1", DAY, TimeSlot.EVENING, 34.0, -85.0)

    anchor = resolve_anchor(rep, DAY, TimeSlot.MIDDAY, [evening, morning])

    assert anchor.source is AnchorSource.PRIOR_APPOINTMENT
    assert anchor.location == GeoPoint(lat=33.5, lng=-84.5)
    assert anchor.appointment_id == "M"


def test_latest_earlier_appointment_is_used(make_rep, make_appointment):
    rep = make_rep("r1", 33.0, -84.0)
    morning = make_appointment("M", "r1", DAY, TimeSlot.MORNING, 33.5, -84.5)
    midday = make_appointment("D", "r1", DAY, TimeSlot.MIDDAY, 33.7, -84.7)

    anchor = resolve_anchor(rep, DAY, TimeSlot.EVENING, [morning, midday])

    assert anchor.appointment_id == "D"


def test_next_appointment_used_when_target_is_first_of_day(make_rep, make_appointment):
    rep = make_rep("r1", 33.0, -84.0)
    midday = make_appointment("D", "r1", DAY, TimeSlot.MIDDAY, 33.7, -84.7)
    evening = make_appointment("E", "r1", DAY, TimeSlot.EVENING, 34.0, -85.0)

    anchor = resolve_anchor(rep, DAY, TimeSlot.MORNING, [evening, midday])

    assert anchor.source is AnchorSource.NEXT_APPOINTMENT
    assert anchor.appointment_id == "D"


def test_prior_only_rule_falls_back_to_home(make_rep, make_appointment):
    rep = make_rep("r1", 33.0, -84.0)
    evening = make_appointment("E", "r1", DAY, TimeSlot.EVENING, 34.0, -85.0)

    anchor = resolve_anchor(rep, DAY, TimeSlot.MORNING, [evening], rule=AnchorRule.PRIOR_ONLY)

    assert anchor.source is AnchorSource.HOME


def test_inert_and_unrelated_appointments_are_ignored(make_rep, make_appointment):
    rep = make_rep("r1", 33.0, -84.0)
    appointments = [
        make_appointment("C", "r1", DAY, TimeSlot.MORNING, 33.5, -84.5, status=AppointmentStatus.CANCELLED),
        make_appointment("X", "r1", DAY, TimeSlot.MORNING, 33.5, -84.5, status=AppointmentStatus.COMPLETED),
        make_appointment("O", "other", DAY, TimeSlot.MORNING, 33.5, -84.5),
        make_appointment("Y", "r1", date(2024, 6, 11), TimeSlot.MORNING, 33.5, -84.5),
    ]

    anchor = resolve_anchor(rep, DAY, TimeSlot.MIDDAY, appointments)

    assert anchor.source is AnchorSource.HOME
