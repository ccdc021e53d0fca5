#!/usr/bin/env python3
"""Headless command-line runner for the CHIP-8 interpreter."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from .config import MachineConfig
from .constants import INSTRUCTIONS_PER_FRAME
from .display import render_ascii, save_snapshot_png
from .emulator import Chip8Emulator
from .errors import Chip8Error
from .tracing import trace_dispatcher


def run_emulator(
    rom_path: str,
    *,
    frames: int = 600,
    instructions_per_frame: int = INSTRUCTIONS_PER_FRAME,
    config: Optional[MachineConfig] = None,
    save_png: Optional[str] = None,
    zoom: int = 8,
    show_ascii: bool = False,
    perfetto_trace: Optional[str] = None,
    print_stats: bool = True,
) -> Chip8Emulator:
    """Load a ROM and run it for a fixed number of frames.

    Fatal interpreter faults propagate after the trace (if any) is closed.
    """
    emu = Chip8Emulator(config)
    emu.load_rom_file(rom_path)

    if perfetto_trace:
        trace_dispatcher.start_trace(perfetto_trace)

    start = time.perf_counter()
    try:
        emu.run(frames, instructions_per_frame)
    finally:
        if perfetto_trace:
            trace_dispatcher.stop_trace()
        elapsed = time.perf_counter() - start

        if print_stats:
            print(f"Executed {emu.instruction_count} instructions in {emu.frame_count} frames")
            print(f"Wall time: {elapsed:.3f}s, PC=0x{emu.pc:03X}")
            if emu.cpu.unknown_opcodes:
                print("Unmapped opcodes:")
                for word, count in sorted(emu.cpu.unknown_opcodes.items()):
                    print(f"  {word:04X}: {count}")

    frame = emu.last_frame or emu.frame()
    if save_png:
        out = save_snapshot_png(frame, save_png, zoom=zoom)
        if print_stats:
            print(f"Saved display to {out}")
    if show_ascii:
        print(render_ascii(frame))

    return emu


def _load_config(args: argparse.Namespace) -> MachineConfig:
    if args.config:
        config = MachineConfig.load(args.config)
    else:
        config = MachineConfig.for_model(args.model)
    if args.seed is not None:
        config.rng_seed = args.seed
    return config


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="CHIP-8 interpreter (headless)")
    parser.add_argument("rom", type=str, help="Path to a CHIP-8 program image")
    parser.add_argument(
        "--frames", type=int, default=600, help="Number of 60 Hz frames to run"
    )
    parser.add_argument(
        "--instructions-per-frame",
        type=int,
        default=INSTRUCTIONS_PER_FRAME,
        help="Instruction ticks issued between 60 Hz ticks",
    )
    parser.add_argument(
        "--model",
        choices=MachineConfig.available_models(),
        default="CHIP-8",
        help="Quirk preset",
    )
    parser.add_argument("--config", type=str, help="JSON machine configuration")
    parser.add_argument("--seed", type=int, help="Seed for CXNN random numbers")
    parser.add_argument("--save-png", type=str, help="Save the final frame as PNG")
    parser.add_argument("--zoom", type=int, default=8, help="PNG scale factor")
    parser.add_argument(
        "--ascii", action="store_true", help="Print the final frame as text"
    )
    parser.add_argument("--perfetto", type=str, help="Write a Perfetto trace here")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not Path(args.rom).is_file():
        print(f"Error: ROM not found at '{args.rom}'", file=sys.stderr)
        return 1

    try:
        run_emulator(
            args.rom,
            frames=args.frames,
            instructions_per_frame=args.instructions_per_frame,
            config=_load_config(args),
            save_png=args.save_png,
            zoom=args.zoom,
            show_ascii=args.ascii,
            perfetto_trace=args.perfetto,
        )
    except Chip8Error as exc:
        print(f"Emulation stopped: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
