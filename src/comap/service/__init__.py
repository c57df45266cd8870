from comap.service.estimate import bounds_info, estimate_at_point, sensors_overview

__all__ = ["bounds_info", "estimate_at_point", "sensors_overview"]
