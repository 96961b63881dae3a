import typing

JSONScalar = typing.Union[bool, int, float, str]
JSONArray = typing.Sequence[typing.Any]
JSONObject = typing.Mapping[str, typing.Any]
JSONValue = typing.Union[JSONScalar, JSONArray, JSONObject, None]

# the intermediate decode target; objects keep every key the provider sent
NormalizedValue = JSONValue
