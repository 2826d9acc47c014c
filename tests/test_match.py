import math

import pytest

from cmap import CMAP, BoundingBox, InvalidParameter, MatchDirective, MatchRequest

SOURCE = ("tblKM1314_Cobalmins", "Me_PseudoCobalamin_Particulate_pM")
BOUNDS = ("2013-08-11", "2013-09-05", 22.25, 48.0, -159.0, -149.0, 0, 300)
TARGETS = ["tblSST_AVHRR_OI_NRT", "tblPisces_NRT"]
VARIABLES = ["sst", "Fe"]
TOLERANCES = {
    "temporal_tolerance": [1, 4],
    "lat_tolerance": [0.25, 0.5],
    "lon_tolerance": [0.25, 0.5],
    "depth_tolerance": [5, 5],
}


def _match(api: CMAP, **overrides):
    kwargs = dict(TOLERANCES, target_tables=TARGETS, target_variables=VARIABLES)
    kwargs.update(overrides)
    return api.match(
        *SOURCE,
        kwargs["target_tables"],
        kwargs["target_variables"],
        *BOUNDS,
        kwargs["temporal_tolerance"],
        kwargs["lat_tolerance"],
        kwargs["lon_tolerance"],
        kwargs["depth_tolerance"],
    )


@pytest.mark.parametrize("name", ["target_variables", *TOLERANCES])
@pytest.mark.parametrize("delta", [-1, 1])
def test_misaligned_lists_fail_before_dispatch(api: CMAP, stub, name: str, delta: int) -> None:
    base = VARIABLES if name == "target_variables" else TOLERANCES[name]
    values = base[:delta] if delta < 0 else base + base[:1]

    with pytest.raises(InvalidParameter, match="Mismatched target specification length"):
        _match(api, **{name: values})

    assert stub.requests == []


def test_at_least_one_target(api: CMAP, stub) -> None:
    empty = {name: [] for name in TOLERANCES}

    with pytest.raises(InvalidParameter, match="At least one target required"):
        _match(api, target_tables=[], target_variables=[], **empty)

    assert stub.requests == []


@pytest.mark.parametrize("bad", ["1", None, -1, math.nan, math.inf, True])
def test_tolerances_must_be_non_negative_numbers(api: CMAP, stub, bad) -> None:
    with pytest.raises(InvalidParameter, match="Tolerance must be numeric and non-negative"):
        _match(api, lat_tolerance=[0.25, bad])

    assert stub.requests == []


def test_reversed_bounds_fail_before_dispatch(api: CMAP, stub) -> None:
    with pytest.raises(InvalidParameter, match="lat1"):
        api.match(*SOURCE, TARGETS, VARIABLES, "2013-08-11", "2013-09-05", 48, 22, -159, -149, 0, 300,
                  *TOLERANCES.values())

    assert stub.requests == []


def test_directive_sql_argument_order() -> None:
    directive = MatchDirective(
        source_table=SOURCE[0],
        source_variable=SOURCE[1],
        target_table="tblSST_AVHRR_OI_NRT",
        target_variable="sst",
        bbox=BoundingBox(*BOUNDS),
        temporal_tolerance=1,
        lat_tolerance=0.25,
        lon_tolerance=0.25,
        depth_tolerance=5,
    )

    assert directive.to_sql() == (
        "EXEC uspMatch 'tblKM1314_Cobalmins', 'Me_PseudoCobalamin_Particulate_pM', "
        "'tblSST_AVHRR_OI_NRT', 'sst', '2013-08-11', '2013-09-05', '22.25', '48.0', "
        "'-159.0', '-149.0', '0', '300', '1', '0.25', '0.25', '5'"
    )


def test_directives_pair_lists_by_position() -> None:
    request = MatchRequest(
        *SOURCE, TARGETS, VARIABLES, BoundingBox(*BOUNDS), **TOLERANCES
    ).validate()

    directives = list(request.directives())

    assert [(d.target_table, d.target_variable, d.temporal_tolerance, d.lat_tolerance) for d in directives] == [
        ("tblSST_AVHRR_OI_NRT", "sst", 1, 0.25),
        ("tblPisces_NRT", "Fe", 4, 0.5),
    ]


def test_scalar_arguments_are_single_targets() -> None:
    request = MatchRequest(*SOURCE, "tblSST_AVHRR_OI_NRT", "sst", BoundingBox(*BOUNDS), 1, 0.25, 0.25, 5)

    assert request.validate().target_tables == ["tblSST_AVHRR_OI_NRT"]
    assert request.depth_tolerance == [5]


def test_match_dispatches_one_call_per_target_and_combines(api: CMAP, stub) -> None:
    columns = "time,lat,lon,depth,Me_PseudoCobalamin_Particulate_pM"
    stub.add("'tblSST_AVHRR_OI_NRT'", f"{columns},sst\n2013-08-11,22.3,-158.0,5,1.2,26.1\n")
    stub.add("'tblPisces_NRT'", f"{columns},Fe\n2013-08-11,22.3,-158.0,5,1.2,0.001\n")

    df = _match(api)

    assert len(stub.requests) == 2
    assert all(q.startswith("EXEC uspMatch 'tblKM1314_Cobalmins'") for q in stub.queries)
    assert "'4', '0.5', '0.5', '5'" in stub.queries[1]
    assert len(df) == 1
    assert df["sst"].iloc[0] == 26.1
    assert df["Fe"].iloc[0] == 0.001


def test_climatology_tolerance_is_passed_through(api: CMAP, stub) -> None:
    stub.add("uspMatch", "time,lat,lon,depth,x,NO3\n")

    api.match(*SOURCE, ["tblDarwin_Nutrient_Climatology"], ["NO3"], *BOUNDS, [0], [0.5], [0.5], [5])

    assert stub.queries[0].endswith("'tblDarwin_Nutrient_Climatology', 'NO3', '2013-08-11', '2013-09-05', "
                                    "'22.25', '48.0', '-159.0', '-149.0', '0', '300', '0', '0.5', '0.5', '5'")


BOUNDS_CSV = "ID,dt1,dt2,lat1,lat2,lon1,lon2\n589,2013-08-11 00:00:00,2013-09-05 00:00:00,22.25,48.0,-159.0,-149.0\n"


def test_along_track(api: CMAP, stub) -> None:
    stub.add("uspCruiseByName", "ID,Name,Nickname\n589,KM1314,Cobalamin\n")
    stub.add("uspCruiseBounds 589", BOUNDS_CSV)
    stub.add("uspMatch", "time,lat,lon,depth,sst\n2013-08-11,22.3,-158.0,5,26.1\n")

    df = api.along_track("KM1314", ["tblSST_AVHRR_OI_NRT"], ["sst"], 0, 5, [1], [0.25], [0.25], [5])

    assert stub.queries[:2] == ["EXEC uspCruiseByName 'KM1314'", "EXEC uspCruiseBounds 589"]
    assert stub.queries[2] == (
        "EXEC uspMatch 'tblCruise_Trajectory', '589', 'tblSST_AVHRR_OI_NRT', 'sst', "
        "'2013-08-11T00:00:00', '2013-09-05T00:00:00', '22.25', '48.0', '-159.0', '-149.0', "
        "'0', '5', '1', '0.25', '0.25', '5'"
    )
    assert df["sst"].tolist() == [26.1]


def test_along_track_sends_utc_bounds_without_offset(api: CMAP, stub) -> None:
    stub.add("uspCruiseByName", "ID,Name,Nickname\n589,KM1314,Cobalamin\n")
    stub.add(
        "uspCruiseBounds 589",
        "ID,dt1,dt2,lat1,lat2,lon1,lon2\n"
        "589,2013-08-11T00:00:00Z,2013-09-05T12:30:00+02:00,22.25,48.0,-159.0,-149.0\n",
    )
    stub.add("uspMatch", "time,lat,lon,depth,sst\n")

    api.along_track("KM1314", ["tblSST_AVHRR_OI_NRT"], ["sst"], 0, 5, [1], [0.25], [0.25], [5])

    assert "'2013-08-11T00:00:00', '2013-09-05T10:30:00'" in stub.queries[2]
    assert "+00:00" not in stub.queries[2]


@pytest.mark.parametrize("name", list(TOLERANCES))
def test_along_track_validates_before_cruise_lookup(api: CMAP, stub, name: str) -> None:
    tolerances = {key: [1] for key in TOLERANCES}
    tolerances[name] = [1, 1]

    with pytest.raises(InvalidParameter, match="Mismatched"):
        api.along_track("KM1314", ["tblSST_AVHRR_OI_NRT"], ["sst"], 0, 5, *tolerances.values())

    assert stub.requests == []


def test_along_track_unknown_cruise(api: CMAP, stub) -> None:
    from cmap import NotFound

    stub.add("uspCruiseByName", "ID,Name\n")

    with pytest.raises(NotFound):
        api.along_track("nothing", ["tblSST_AVHRR_OI_NRT"], ["sst"], 0, 5, [1], [0.25], [0.25], [5])

    assert len(stub.requests) == 1
