"""Engine layer: generation loop, scheduler, triggers."""

from shapegrammar.engine.generation_loop import GenerationLoop
from shapegrammar.engine.scheduler import RegenerationScheduler
from shapegrammar.engine.trigger import BuildTrigger
from shapegrammar.engine.trigger_queue import TriggerQueue, TriggerRequest

__all__ = ["BuildTrigger", "GenerationLoop", "RegenerationScheduler", "TriggerQueue", "TriggerRequest"]
