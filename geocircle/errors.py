class GeoCircleError(Exception):
    """Base class for geocircle errors."""


class CircleStateError(GeoCircleError):
    """A circle was used in a way its current lifecycle state does not allow."""
    def __init__(self, message: str, instance_id: int):
        self.instance_id = instance_id
        super().__init__(message)
