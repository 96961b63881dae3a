import typing


class SentinelType:
    _singletons: typing.ClassVar[typing.Dict[str, "SentinelType"]] = {}
    _name: str

    def __bool__(self):
        return False

    def __repr__(self) -> str:
        return self._name

    def __reduce__(self):
        return (SentinelType, (self._name,))

    def __new__(cls, name: str) -> "SentinelType":
        singleton = cls._singletons.get(name)
        if singleton is None:
            singleton = object.__new__(cls)
            singleton._name = name
            cls._singletons[name] = singleton
        return singleton


# an input value the caller never supplied
UNSPECIFIED = SentinelType("UNSPECIFIED")

# a field that does not appear in a decoded payload at all
ABSENT = SentinelType("ABSENT")
