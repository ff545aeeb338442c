"""Builders for small QCLCD station and hourly files used across tests."""

STATION_HEADER = (
    "WBAN|WMO|CallSign|ClimateDivisionCode|ClimateDivisionStateCode|"
    "ClimateDivisionStationCode|Name|State|Location|Latitude|Longitude|"
    "GroundHeight|StationHeight|Barometer|TimeZone"
)

OBSERVATION_HEADER = ",".join(
    [
        "WBAN", "Date", "Time", "StationType", "SkyCondition", "SkyConditionFlag",
        "Visibility", "VisibilityFlag", "WeatherType", "WeatherTypeFlag",
        "DryBulbFarenheit", "DryBulbFarenheitFlag", "DryBulbCelsius", "DryBulbCelsiusFlag",
        "WetBulbFarenheit", "WetBulbFarenheitFlag", "WetBulbCelsius", "WetBulbCelsiusFlag",
        "DewPointFarenheit", "DewPointFarenheitFlag", "DewPointCelsius", "DewPointCelsiusFlag",
        "RelativeHumidity", "RelativeHumidityFlag", "WindSpeed", "WindSpeedFlag",
        "WindDirection", "WindDirectionFlag", "ValueForWindCharacter",
        "ValueForWindCharacterFlag", "StationPressure", "StationPressureFlag",
        "PressureTendency", "PressureTendencyFlag", "PressureChange", "PressureChangeFlag",
        "SeaLevelPressure", "SeaLevelPressureFlag", "RecordType", "RecordTypeFlag",
        "HourlyPrecip", "HourlyPrecipFlag", "Altimeter", "AltimeterFlag",
    ]
)


def station_line(wban: str, name: str = "TEST", state: str = "IL", **overrides: str) -> str:
    cells = {
        "wban": wban,
        "wmo": "72530",
        "call_sign": name,
        "cd_code": "02",
        "cd_state": "11",
        "cd_station": "1549",
        "name": name,
        "state": state,
        "location": "CHICAGO",
        "latitude": "41.995",
        "longitude": "-87.934",
        "ground_height": "662",
        "station_height": "672",
        "barometer": "652",
        "time_zone": "-6",
    }
    cells.update(overrides)
    return "|".join(cells.values())


def observation_line(
    wban: str,
    date: str = "20150301",
    time: str = "0051",
    dry_bulb_celsius: str = "-2.8",
    wind_speed: str = "11",
    station_pressure: str = "29.42",
    sky_condition: str = "OVC020",
    **overrides: str,
) -> str:
    cells = [""] * 44
    cells[0] = wban
    cells[1] = date
    cells[2] = time
    cells[3] = "0"
    cells[4] = sky_condition
    cells[6] = "10.00"
    cells[12] = dry_bulb_celsius
    cells[16] = "-4.2"
    cells[20] = "-8.3"
    cells[22] = "66"
    cells[24] = wind_speed
    cells[26] = "280"
    cells[30] = station_pressure
    cells[36] = "30.12"
    cells[40] = "M"
    positions = {
        "visibility": 6,
        "wet_bulb_celsius": 16,
        "dew_point_celsius": 20,
        "relative_humidity": 22,
        "wind_direction": 26,
        "sea_level_pressure": 36,
        "hourly_precip": 40,
    }
    for key, value in overrides.items():
        cells[positions[key]] = value
    return ",".join(cells)


