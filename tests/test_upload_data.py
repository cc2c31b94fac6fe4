"""Tests for upload payload aggregation and S2S chase derivation."""

from __future__ import annotations

import copy

import pytest

from sota_client.records import Activation, Chase, Qso
from sota_client.upload import UploadData


def make_activation(day: str, summit: str, s2s_code: str = "TEST", own="w0keh") -> Activation:
    return Activation(
        date=day,
        summit=summit,
        own_callsign=own,
        qsos=[
            Qso(date=day, time="23:23", callsign="W0KEH/0", mode="SSB", band="14.310MHz"),
            Qso(
                date=day,
                time="23:24",
                callsign="W0KEH/1",
                mode="SSB",
                band="14.310MHz",
                s2s_summit_code=s2s_code,
                comments="s2s",
            ),
        ],
    )


@pytest.fixture
def upload_data() -> UploadData:
    data = UploadData()
    data.add_activation(make_activation("2025-05-29", "W3/PW-024", "TEST1"))
    data.add_activation(make_activation("2025-05-28", "W4/PW-024", "TEST2"))
    for day in ("2025-05-29", "2025-05-28"):
        data.add_chase(
            Chase(
                date=day,
                time_str="23:23",
                own_callsign="w0keh",
                other_callsign="W1AW",
                s2s_summit_code="JA/NMN-181",
                band="14MHz",
                mode="CW",
            )
        )
    return data


def test_empty_upload_data() -> None:
    data = UploadData()

    assert data.to_dict() == {"activations": [], "s2s": [], "chases": []}
    assert data.is_empty()
    assert len(data) == 0


def test_activations_and_chases_keep_insertion_order(upload_data: UploadData) -> None:
    payload = upload_data.to_dict()

    assert [a["summit"] for a in payload["activations"]] == ["W3/PW-024", "W4/PW-024"]
    assert [a["date"] for a in payload["activations"]] == ["29/05/2025", "28/05/2025"]
    assert [c["date"] for c in payload["chases"]] == ["29/05/2025", "28/05/2025"]
    assert payload["activations"][0] == upload_data.activations[0].to_dict()
    assert payload["chases"][1] == upload_data.chases[1].to_dict()


def test_s2s_derived_from_activation_qsos(upload_data: UploadData) -> None:
    s2s = upload_data.to_dict()["s2s"]

    assert len(s2s) == 2
    first, second = s2s
    assert first == {
        "date": "29/05/2025",
        "timeStr": "23:24",
        "otherCallsign": "W0KEH/1",
        "ownCallsign": "w0keh",
        "s2sSummitCode": "TEST1",
        "summitCode": "W3/PW-024",
        "mode": "SSB",
        "band": "14.310MHz",
        "comments": "s2s",
    }
    assert second["summitCode"] == "W4/PW-024"
    assert second["s2sSummitCode"] == "TEST2"


def test_documented_example() -> None:
    data = UploadData()
    data.add_activation(
        Activation(
            date="2025-05-29",
            summit="W3/PW-024",
            own_callsign="W0KEH",
            qsos=[
                Qso(
                    date="2025-05-29",
                    callsign="W1AW",
                    s2s_summit_code="JA/NN-181",
                    mode="CW",
                    band="14.310MHz",
                )
            ],
        )
    )

    (chase,) = data.to_dict()["s2s"]

    assert chase["date"] == "29/05/2025"
    assert chase["otherCallsign"] == "W1AW"
    assert chase["ownCallsign"] == "W0KEH"
    assert chase["s2sSummitCode"] == "JA/NN-181"
    assert chase["summitCode"] == "W3/PW-024"
    assert chase["mode"] == "CW"
    assert chase["band"] == "14.310MHz"


def test_activation_without_s2s_contributes_nothing() -> None:
    data = UploadData()
    data.add_activation(Activation(date="2025-05-29", summit="W3/PW-024"))
    data.add_activation(
        Activation(
            date="2025-05-29",
            summit="W3/PW-025",
            qsos=[Qso(date="2025-05-29", callsign="W1AW", s2s_summit_code="")],
        )
    )

    payload = data.to_dict()

    assert payload["s2s"] == []
    assert len(payload["activations"]) == 2


def test_s2s_ordering_follows_activation_then_qso_order() -> None:
    data = UploadData()
    data.add_activation(
        Activation(
            date="2025-05-29",
            summit="A/AA-001",
            qsos=[
                Qso(date="2025-05-29", callsign="ONE", s2s_summit_code="X/XX-001"),
                Qso(date="2025-05-29", callsign="SKIP"),
                Qso(date="2025-05-29", callsign="TWO", s2s_summit_code="X/XX-002"),
            ],
        )
    )
    data.add_activation(
        Activation(
            date="2025-05-30",
            summit="B/BB-001",
            qsos=[Qso(date="2025-05-30", callsign="THREE", s2s_summit_code="X/XX-003")],
        )
    )

    calls = [c["otherCallsign"] for c in data.to_dict()["s2s"]]

    assert calls == ["ONE", "TWO", "THREE"]


def test_duplicate_remote_summits_are_not_deduplicated() -> None:
    data = UploadData()
    activation = make_activation("2025-05-29", "W3/PW-024", "JA/NN-181")
    data.add_activation(activation)
    data.add_activation(make_activation("2025-05-29", "W3/PW-025", "JA/NN-181"))
    data.add_activation(activation)

    s2s = data.to_dict()["s2s"]

    assert [c["summitCode"] for c in s2s] == ["W3/PW-024", "W3/PW-025", "W3/PW-024"]


def test_serialisation_is_idempotent_and_pure(upload_data: UploadData) -> None:
    activations_before = copy.deepcopy(list(upload_data.activations))
    chases_before = copy.deepcopy(list(upload_data.chases))

    first = upload_data.to_dict()
    second = upload_data.to_dict()

    assert first == second
    assert list(upload_data.activations) == activations_before
    assert list(upload_data.chases) == chases_before


def test_payload_reflects_later_additions(upload_data: UploadData) -> None:
    before = upload_data.to_dict()
    upload_data.add_activation(make_activation("2025-06-01", "W5/PW-001", "TEST3"))

    after = upload_data.to_dict()

    assert len(after["activations"]) == len(before["activations"]) + 1
    assert after["s2s"][-1]["s2sSummitCode"] == "TEST3"
    assert after["s2s"][:-1] == before["s2s"]


def test_summary_counts(upload_data: UploadData) -> None:
    assert upload_data.summary() == {"activations": 2, "qsos": 4, "s2s": 2, "chases": 2}
    assert len(upload_data) == 4
