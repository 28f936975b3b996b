"""Scan-cycle interpreter.

Executes an instruction list once, left to right, against the previous
SimulationState and returns the next one:

    step(instructions, previous_state, dt_ms) -> next_state

The interpreter never reads a clock; elapsed time is an input, which keeps
replays deterministic.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ladderflow.core.context import ScanContext
from ladderflow.core.instruction import Instruction, Opcode
from ladderflow.core.operands import Namespace, namespace_of, preset_ms, resolve_operand
from ladderflow.core.state import SimulationState

logger = logging.getLogger(__name__)

DINT_MAX = 2_147_483_647

Handler = Callable[[ScanContext, Instruction], None]


def step(
    instructions: Sequence[Instruction],
    previous_state: SimulationState,
    dt_ms: int,
) -> SimulationState:
    """Run one scan cycle and return the committed state.

    An empty program returns ``previous_state`` itself.
    """
    if not instructions:
        return previous_state

    ctx = ScanContext(previous_state, dt_ms=dt_ms)
    for inst in instructions:
        handler = _HANDLERS.get(inst.type)
        if handler is None:
            logger.debug("Skipping unknown opcode %r (id=%s)", inst.type, inst.id)
            continue
        handler(ctx, inst)
    return ctx.commit()


# =============================================================================
# Contacts
# =============================================================================


def _load(ctx: ScanContext, inst: Instruction) -> None:
    ctx.push(ctx.get_bit(inst.value))


def _load_inverse(ctx: ScanContext, inst: Instruction) -> None:
    ctx.push(not ctx.get_bit(inst.value))


def _and(ctx: ScanContext, inst: Instruction) -> None:
    top = ctx.pop()
    ctx.push(top and ctx.get_bit(inst.value))


def _and_inverse(ctx: ScanContext, inst: Instruction) -> None:
    top = ctx.pop()
    ctx.push(top and not ctx.get_bit(inst.value))


def _or(ctx: ScanContext, inst: Instruction) -> None:
    top = ctx.pop()
    ctx.push(top or ctx.get_bit(inst.value))


def _or_inverse(ctx: ScanContext, inst: Instruction) -> None:
    top = ctx.pop()
    ctx.push(top or not ctx.get_bit(inst.value))


def _or_block(ctx: ScanContext, inst: Instruction) -> None:
    a = ctx.pop()
    b = ctx.pop()
    ctx.push(a or b)


def _and_block(ctx: ScanContext, inst: Instruction) -> None:
    a = ctx.pop()
    b = ctx.pop()
    ctx.push(a and b)


# =============================================================================
# Comparators
# =============================================================================


def _equal(ctx: ScanContext, inst: Instruction) -> bool:
    left = resolve_operand(inst.value, ctx.data)
    right = resolve_operand(inst.arg(1, "0"), ctx.data)
    return left == right


def _load_equal(ctx: ScanContext, inst: Instruction) -> None:
    ctx.push(_equal(ctx, inst))


def _and_equal(ctx: ScanContext, inst: Instruction) -> None:
    top = ctx.pop()
    ctx.push(top and _equal(ctx, inst))


def _or_equal(ctx: ScanContext, inst: Instruction) -> None:
    top = ctx.pop()
    ctx.push(top or _equal(ctx, inst))


# =============================================================================
# Branch stack
# =============================================================================


def _push_branch(ctx: ScanContext, inst: Instruction) -> None:
    ctx.mps.append(ctx.peek())


def _read_branch(ctx: ScanContext, inst: Instruction) -> None:
    ctx.push(ctx.mps[-1] if ctx.mps else False)


def _pop_branch(ctx: ScanContext, inst: Instruction) -> None:
    ctx.push(ctx.mps.pop() if ctx.mps else False)


# =============================================================================
# Coils
# =============================================================================


def _out(ctx: ScanContext, inst: Instruction) -> None:
    enabled = ctx.peek()
    target = inst.value
    kind = namespace_of(target)

    if kind is Namespace.TIMER:
        if enabled:
            elapsed = ctx.get_timer(target) + ctx.dt_ms
            ctx.set_timer(target, elapsed)
            ctx.set_bit(target, elapsed >= preset_ms(inst.arg(1), ctx.data))
        else:
            ctx.set_timer(target, 0)
            ctx.set_bit(target, False)
    elif kind is Namespace.COUNTER:
        if ctx.rising_edge(target, enabled):
            count = min(ctx.get_counter(target) + 1, DINT_MAX)
            ctx.set_counter(target, count)
            if count >= resolve_operand(inst.arg(1), ctx.data):
                ctx.set_bit(target, True)
    else:
        ctx.set_bit(target, enabled)


def _set(ctx: ScanContext, inst: Instruction) -> None:
    if ctx.peek():
        ctx.set_bit(inst.value, True)


def _reset(ctx: ScanContext, inst: Instruction) -> None:
    if not ctx.peek():
        return
    target = inst.value
    match namespace_of(target):
        case Namespace.TIMER:
            ctx.set_timer(target, 0)
            ctx.set_bit(target, False)
        case Namespace.COUNTER:
            ctx.set_counter(target, 0)
            ctx.set_bit(target, False)
            ctx.clear_edge(target)
        case Namespace.DATA:
            ctx.set_data(target, 0)
        case Namespace.BIT:
            ctx.set_bit(target, False)


def _move(ctx: ScanContext, inst: Instruction) -> None:
    if ctx.peek() and len(inst.args) >= 2:
        ctx.set_data(inst.args[1], resolve_operand(inst.args[0], ctx.data))


def movp_edge_key(inst: Instruction) -> str:
    """Edge-memory key of a pulse move; tied to the id, not the position."""
    return f"MOVP:{inst.id}"


def _move_pulse(ctx: ScanContext, inst: Instruction) -> None:
    fired = ctx.rising_edge(movp_edge_key(inst), ctx.peek())
    if fired and len(inst.args) >= 2:
        ctx.set_data(inst.args[1], resolve_operand(inst.args[0], ctx.data))


_HANDLERS: dict[str, Handler] = {
    Opcode.LD: _load,
    Opcode.LDI: _load_inverse,
    Opcode.AND: _and,
    Opcode.ANI: _and_inverse,
    Opcode.OR: _or,
    Opcode.ORI: _or_inverse,
    Opcode.ORB: _or_block,
    Opcode.ANB: _and_block,
    Opcode.LD_EQ: _load_equal,
    Opcode.AND_EQ: _and_equal,
    Opcode.OR_EQ: _or_equal,
    Opcode.MPS: _push_branch,
    Opcode.MRD: _read_branch,
    Opcode.MPP: _pop_branch,
    Opcode.OUT: _out,
    Opcode.SET: _set,
    Opcode.RST: _reset,
    Opcode.MOV: _move,
    Opcode.MOVP: _move_pulse,
}
