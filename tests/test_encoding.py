from datetime import date, datetime

import numpy as np
import pytest

from cmap import MalformedRequest, encode_payload
from cmap.encoding import encode_value, sql_literal


def test_encode_payload_keeps_order_and_joins_pairs() -> None:
    payload = {"tableName": "tblsst_AVHRR_OI_NRT", "dt1": "2016-04-30", "lat1": 10, "lon1": -180.5}

    encoded = encode_payload(payload)

    assert encoded == "tableName=tblsst_AVHRR_OI_NRT&dt1=2016-04-30&lat1=10&lon1=-180.5"
    assert encoded.count("&") == len(payload) - 1
    assert not encoded.endswith("&")


def test_encode_payload_percent_encodes_values() -> None:
    encoded = encode_payload({"query": "EXEC uspSearchCatalog 'sea surface'", "expr": "a&b=c+d/e"})

    assert encoded == "query=EXEC%20uspSearchCatalog%20%27sea%20surface%27&expr=a%26b%3Dc%2Bd%2Fe"


def test_encode_payload_one_pair_per_field() -> None:
    payload = {f"field{i}": i for i in range(11)}

    pairs = encode_payload(payload).split("&")

    assert [p.split("=")[0] for p in pairs] == list(payload)


def test_encode_payload_empty() -> None:
    assert encode_payload({}) == ""


@pytest.mark.parametrize("value", [None, True, [1, 2], {"a": 1}, object()])
def test_encode_payload_rejects_non_scalars(value) -> None:
    with pytest.raises(MalformedRequest, match="field 'x'"):
        encode_payload({"x": value})


def test_encode_payload_rejects_empty_field_name() -> None:
    with pytest.raises(MalformedRequest):
        encode_payload({"": "value"})


def test_encode_value_scalars() -> None:
    assert encode_value(np.float64(0.25)) == "0.25"
    assert encode_value(np.int64(3)) == "3"
    assert encode_value(datetime(2016, 4, 30, 12, 0)) == "2016-04-30T12:00:00"
    assert encode_value(date(2016, 4, 30)) == "2016-04-30"


def test_sql_literal_doubles_quotes() -> None:
    assert sql_literal("O'Brien") == "'O''Brien'"
    assert sql_literal(5) == "'5'"
