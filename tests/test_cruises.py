import pytest

from cmap import CMAP, AmbiguousLookup, NotFound

KM1314 = "ID,Name,Nickname,Chief_Name\n589,KM1314,Cobalamin,Anitra Ingalls\n"


def test_cruise_by_name_single_match(api: CMAP, stub) -> None:
    stub.add("uspCruiseByName", KM1314)

    df = api.cruise_by_name("KM1314")

    assert len(df) == 1
    assert df["ID"].iloc[0] == 589
    assert stub.queries == ["EXEC uspCruiseByName 'KM1314'"]


def test_cruise_by_name_no_match(api: CMAP, stub) -> None:
    stub.add("uspCruiseByName", "ID,Name,Nickname\n")

    with pytest.raises(NotFound, match="Invalid cruise name: nothing"):
        api.cruise_by_name("nothing")


def test_cruise_by_name_ambiguous(api: CMAP, stub) -> None:
    stub.add("uspCruiseByName", "ID,Name,Nickname\n589,KM1314,Cobalamin\n590,KM1315,Cobalamin2\n")

    with pytest.raises(AmbiguousLookup, match="more specific") as excinfo:
        api.cruise_by_name("KM13")

    assert excinfo.value.matches["Name"].tolist() == ["KM1314", "KM1315"]


def test_cruise_scoped_queries_use_cruise_id(api: CMAP, stub) -> None:
    stub.add("uspCruiseByName", KM1314)
    stub.add("", "col\n1\n")

    api.cruise_bounds("KM1314")
    api.cruise_trajectory("KM1314")
    api.cruise_variables("KM1314")

    assert stub.queries[1::2] == [
        "EXEC uspCruiseBounds 589",
        "EXEC uspCruiseTrajectory 589",
        "SELECT * FROM dbo.udfCruiseVariables(589)",
    ]


def test_cruise_scoped_query_not_sent_for_unknown_cruise(api: CMAP, stub) -> None:
    stub.add("uspCruiseByName", "ID,Name\n")

    with pytest.raises(NotFound):
        api.cruise_trajectory("nothing")

    assert len(stub.requests) == 1


def test_cruises(api: CMAP, stub) -> None:
    stub.add("uspCruises", KM1314)

    assert api.cruises()["Name"].tolist() == ["KM1314"]
