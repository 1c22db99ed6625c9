"""Decision engine that plays Tetris: board model, rotation rules and planners."""

from .board import Board, InvariantViolation, LineClear
from .tetromino import PIECE_CELLS, Rotation, TetrominoType, shape_cells
from .rotation import (
    ClassicRotationSystem,
    RotateResult,
    RotationSystem,
    SuperRotationSystem,
    get_rotation_system,
)
from .placement import ReachablePlacement, drop_placements, generate_placements
from .features import FEATURE_NAMES, FEAT_DIM, FeatureVector, extract_features
from .evaluator import BCTS_WEIGHTS, Weights, evaluate
from .weights import load_weights, save_weights
from .game import Game, GameConfig, LockResult, Placement, Snapshot, simulate
from .randomizer import BagRandomizer, Randomizer, UniformRandomizer, create_randomizer
from .search import LOSS_SCORE, PlannerConfig
from .greedy import greedy_select
from .expectimax import expectimax_select
from .beam import beam_search_select
from .mode import ModeConfig, classic_mode, modern_mode, select_placement
from .perf import PerfStat, PerformanceTracker
from .benchmark import BenchmarkResult, SummaryStats, compute_stats, run_benchmark

__all__ = [
    "BCTS_WEIGHTS",
    "BagRandomizer",
    "BenchmarkResult",
    "Board",
    "ClassicRotationSystem",
    "FEATURE_NAMES",
    "FEAT_DIM",
    "FeatureVector",
    "Game",
    "GameConfig",
    "InvariantViolation",
    "LOSS_SCORE",
    "LineClear",
    "LockResult",
    "ModeConfig",
    "PIECE_CELLS",
    "PerfStat",
    "PerformanceTracker",
    "Placement",
    "PlannerConfig",
    "Randomizer",
    "ReachablePlacement",
    "RotateResult",
    "Rotation",
    "RotationSystem",
    "Snapshot",
    "SummaryStats",
    "SuperRotationSystem",
    "TetrominoType",
    "UniformRandomizer",
    "Weights",
    "beam_search_select",
    "classic_mode",
    "compute_stats",
    "create_randomizer",
    "drop_placements",
    "evaluate",
    "expectimax_select",
    "extract_features",
    "generate_placements",
    "get_rotation_system",
    "greedy_select",
    "load_weights",
    "modern_mode",
    "run_benchmark",
    "save_weights",
    "select_placement",
    "shape_cells",
    "simulate",
]
