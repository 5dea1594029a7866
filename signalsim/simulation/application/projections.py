"""
Stateless display projections of a TrafficSnapshot.
"""
from ..domain.entities import ApproachLight, LightColor, Phase, TrafficLightStatus, TrafficSnapshot


def approach_color(green: bool, remaining: float, yellow_time: float) -> LightColor:
    if not green:
        return LightColor.RED
    if yellow_time > 0 and remaining <= yellow_time:
        return LightColor.YELLOW
    return LightColor.GREEN


def traffic_light_status(snapshot: TrafficSnapshot, yellow_time: float = 0.0) -> TrafficLightStatus:
    """
    Derives per-approach signal heads from a snapshot.

    The green approach turns YELLOW for the last `yellow_time` seconds of its
    budget. Pedestrians cross on the approach whose vehicles are held at red.
    """
    remaining = snapshot.remaining_green_time
    ns_green = snapshot.active_phase is Phase.PHASE_1

    return TrafficLightStatus(
        time_step=snapshot.time_step,
        timestamp=snapshot.timestamp,
        north_south=ApproachLight(
            color=approach_color(ns_green, remaining, yellow_time),
            duration=remaining,
            pedestrian_crossing=not ns_green,
        ),
        east_west=ApproachLight(
            color=approach_color(not ns_green, remaining, yellow_time),
            duration=remaining,
            pedestrian_crossing=ns_green,
        ),
        current_green_time=snapshot.current_green_time,
        remaining_green_time=remaining,
        next_phase_countdown=remaining,
        north_south_density=snapshot.phase1_density,
        east_west_density=snapshot.phase2_density,
    )
