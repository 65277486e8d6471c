import json
import math
from decimal import Decimal
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from pydantic.functional_serializers import PlainSerializer
from pydantic.functional_validators import BeforeValidator

GROUND = "ground"
NANOSECONDS_PER_SECOND = 1_000_000_000


class OnGround(BaseModel):
    """Barometric altitude reported as the literal "ground" """
    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return GROUND


class AtAltitude(BaseModel):
    """Barometric altitude reported as a number of feet"""
    model_config = ConfigDict(frozen=True)

    feet: Union[int, float] = Field(..., description="Barometric altitude (feet)")

    def __str__(self) -> str:
        return f"{self.feet} ft"


def _parse_alt_baro(value: Any) -> Any:
    if isinstance(value, (OnGround, AtAltitude)):
        return value
    if value == GROUND:
        return OnGround()
    # bool is an int subclass but never a valid altitude
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"alt_baro must be a number or '{GROUND}', got {value!r}")
    return AtAltitude(feet=value)


def _dump_alt_baro(value: Union[OnGround, AtAltitude]) -> Union[str, int, float]:
    if isinstance(value, OnGround):
        return GROUND
    return value.feet


BaroAltitude = Annotated[
    Union[OnGround, AtAltitude],
    BeforeValidator(_parse_alt_baro),
    PlainSerializer(_dump_alt_baro),
]


class AircraftRecord(BaseModel):
    """One tracked aircraft from a dump1090 aircraft.json snapshot.

    Only the fields the forwarder looks at are declared; every other key in
    the source payload is kept as an extra and written back out by
    :meth:`to_json`.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    hex: str = Field(..., description="ICAO24 hex code")
    flight: Optional[str] = Field(None, description="Callsign/flight number")
    # strict keeps 40 as 40 and rejects "40.1" instead of coercing it
    lat: Optional[Union[StrictInt, StrictFloat]] = Field(None, description="Latitude")
    lon: Optional[Union[StrictInt, StrictFloat]] = Field(None, description="Longitude")
    alt_baro: Optional[BaroAltitude] = Field(None, description="Barometric altitude (feet or ground)")

    @property
    def on_ground(self) -> bool:
        return isinstance(self.alt_baro, OnGround)

    def to_json(self) -> str:
        """Serialize the record back to compact JSON.

        Declared fields the source never sent are left out so the line matches
        the receiver's own object. Raises ValueError for values JSON cannot
        carry (NaN, infinity).
        """
        unset = {name for name in type(self).model_fields if name not in self.model_fields_set}
        data = self.model_dump(mode="json", exclude=unset)
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


class AircraftSnapshot(BaseModel):
    """One decoded response from the receiver's aircraft.json endpoint"""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "now": 1700000000.5,
                "messages": 42,
                "aircraft": [
                    {
                        "hex": "abc123",
                        "flight": "UAL123",
                        "lat": 40.1,
                        "lon": -73.9,
                        "alt_baro": 35000
                    }
                ]
            }
        },
    )

    now: float = Field(..., allow_inf_nan=False, description="Snapshot time (unix seconds)")
    messages: int = Field(0, description="Receiver message counter")
    aircraft: List[AircraftRecord] = Field(..., description="Tracked aircraft")

    @property
    def timestamp_ns(self) -> int:
        """Snapshot time in whole nanoseconds, truncated"""
        return math.floor(Decimal(repr(self.now)) * NANOSECONDS_PER_SECOND)
