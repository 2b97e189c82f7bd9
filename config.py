"""
AR location engine configuration
"""

# Engine configuration
ENGINE_CONFIG = {
    "estimate_method": "best_estimate",   # "gps_only" or "best_estimate"
    "update_interval_s": 0.1,             # reconciliation tick period
    "scene_limit_m": 100.0,               # estimate/confirmation/clamp radius
    "animation_duration_s": 0.1,          # per-tick node interpolation
    "show_axes": False,                   # axes helper on the root node
    "orient_to_true_north": True,         # gravity+heading world alignment
    "queue_size": 256,                    # pending location/heading readings
}

# Logging configuration
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# Simulated walk (main.py)
SIMULATION_CONFIG = {
    "origin": {"lat": 22.2900, "lon": 114.1700, "alt": 2.0},
    "steps": 1500,                  # ticks to simulate
    "walk_speed_m_s": 1.4,          # walking east
    "fix_every_ticks": 10,          # one GPS fix per second
    "gps_noise_std_m": 3.0,         # horizontal fix noise
    "accuracies_m": [5.0, 10.0, 15.0, 65.0],
    "tracking_drift": 0.005,        # scene frame drift per meter walked
    "drop_pin_at_tick": 50,         # place a node at the viewer position
    "points_of_interest": [
        {"title": "Pier", "north_m": 40.0, "east_m": 30.0, "up_m": 0.0},
        {"title": "Tower", "north_m": 600.0, "east_m": -250.0, "up_m": 80.0},
        {"title": "Peak", "north_m": -3500.0, "east_m": 1200.0, "up_m": 550.0},
    ],
}
