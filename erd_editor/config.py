from dataclasses import dataclass

@dataclass(frozen=True)
class AppConfig:
    debug: bool = True
    log_level: str = "DEBUG"
    canvas_width: int = 1200
    canvas_height: int = 800
    # where "add node" drops new shapes
    default_node_x: int = 100
    default_node_y: int = 100
    default_from_cardinality: str = "1"
    default_to_cardinality: str = "N"
