"""Error taxonomy shared by the core and the HTTP layer."""


class ShuttleError(Exception):
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFound(ShuttleError):
    status_code = 404


class BusNotFound(NotFound):
    def __init__(self, bus_id: int) -> None:
        super().__init__(f"Bus {bus_id} not found")


class StopNotFound(NotFound):
    def __init__(self, stop_id: int) -> None:
        super().__init__(f"Stop {stop_id} not found")


class RouteNotFound(NotFound):
    def __init__(self, bus_id: int) -> None:
        super().__init__(f"Route for bus {bus_id} not found")


class StartTimeNotFound(NotFound):
    def __init__(self, start_time_id: int) -> None:
        super().__init__(f"Start time {start_time_id} not found")


class LocationNotFound(NotFound):
    def __init__(self, bus_id: int) -> None:
        super().__init__(f"No location for bus {bus_id}")


class NoTripsFound(NotFound):
    pass


class InvalidState(ShuttleError):
    status_code = 409


class StopNotInRoute(InvalidState):
    status_code = 404

    def __init__(self, bus_id: int, stop_id: int) -> None:
        super().__init__(f"Stop {stop_id} is not in the route for bus {bus_id}")
        self.bus_id = bus_id
        self.stop_id = stop_id


class DriverNotAssigned(InvalidState):
    status_code = 403

    def __init__(self, user_id: int, bus_id: int) -> None:
        super().__init__(f"Driver {user_id} is not assigned to bus {bus_id}")


class DuplicateStartTime(InvalidState):
    status_code = 400

    def __init__(self, bus_id: int, rep_no: int) -> None:
        super().__init__(f"Start time for repetition {rep_no} already exists for bus {bus_id}")


class StopInUse(InvalidState):
    def __init__(self, stop_id: int) -> None:
        super().__init__(f"Stop {stop_id} is used by one or more routes")


class UserNotFound(NotFound):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found")


class ProtectedAccount(InvalidState):
    status_code = 403

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} is an admin and cannot be deleted")
