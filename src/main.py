#!/usr/bin/env python3
"""
Text Scroller - Main Entry Point

Usage:
    python3 main.py --message "Hello World"
    python3 main.py --mode infinite --message "Breaking news" --sep-width 4
    sudo python3 main.py --output led --message "Hello LEDs"
"""

import argparse
import asyncio
import sys

from utils import load_config, parse_color, scale_color
from text_scroller import (
    InfiniteScrollOptions,
    InfiniteTextScroll,
    ScrollOptions,
    TextScroll,
)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Scrolling text for fixed-size pixel displays",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 main.py --message "Hello World"
  python3 main.py --message "Up we go" --speed-x 0 --speed-y -4
  python3 main.py --mode infinite --message "Ticker" --speed-x -20
  sudo python3 main.py --output led --message "Hello LEDs"
        """
    )

    parser.add_argument(
        "--message", "-t",
        type=str,
        default=None,
        help="Text message to scroll (default: text_scroller.default_text)"
    )

    parser.add_argument(
        "--mode", "-m",
        choices=["bounded", "infinite"],
        default=None,
        help="Scroll once or wrap forever (default: text_scroller.mode)"
    )

    parser.add_argument(
        "--output", "-o",
        choices=["terminal", "led"],
        default="terminal",
        help="Where to render frames (default: terminal)"
    )

    parser.add_argument(
        "--speed-x",
        type=float,
        default=None,
        help="Horizontal speed in cells per second, negative = leftwards"
    )

    parser.add_argument(
        "--speed-y",
        type=float,
        default=None,
        help="Vertical speed in cells per second (bounded mode only)"
    )

    parser.add_argument(
        "--pause",
        type=float,
        default=None,
        help="Milliseconds to hold the text before scrolling (bounded mode only)"
    )

    parser.add_argument(
        "--sep-width",
        type=int,
        default=None,
        help="Empty columns between repeated copies (infinite mode only)"
    )

    parser.add_argument(
        "--font", "-f",
        type=str,
        default=None,
        help="Font file name from assets/fonts or a path"
    )

    parser.add_argument(
        "--loops",
        type=int,
        default=1,
        help="Number of bounded scrolls to run (0 = forever, default: 1)"
    )

    parser.add_argument(
        "--brightness", "-b",
        type=int,
        default=None,
        help="Override display brightness (0-100)"
    )

    return parser.parse_args(argv)


def apply_overrides(args, config: dict) -> dict:
    """Write command line overrides into the config sections they replace."""
    scroller_config = config.setdefault("text_scroller", {})
    mode = args.mode or scroller_config.get("mode", "bounded")
    scroller_config["mode"] = mode

    if args.speed_x is not None:
        key = "infinite_speed_x" if mode == "infinite" else "speed_x"
        scroller_config[key] = args.speed_x
    if args.speed_y is not None:
        scroller_config["speed_y"] = args.speed_y
    if args.pause is not None:
        scroller_config["time_before_scroll"] = args.pause
    if args.sep_width is not None:
        scroller_config["sep_width"] = args.sep_width
    if args.font is not None:
        scroller_config["font"] = args.font
    if args.brightness is not None:
        brightness = max(0, min(100, args.brightness))
        config.setdefault("matrix", {})["brightness"] = brightness
        scroller_config["brightness"] = brightness
    return config


def create_output(args, config: dict):
    """Create the frame consumer selected on the command line."""
    if args.output == "led":
        # Only import the hardware bindings when they are needed
        from led_output import LedOutput
        return LedOutput(config=config)

    from terminal_output import TerminalOutput
    scroller_config = config.get("text_scroller", {})
    color = scale_color(
        parse_color(scroller_config.get("color", "#FFFFFF")),
        scroller_config.get("brightness", 100),
    )
    return TerminalOutput(color=color)


async def run_bounded(message: str, config: dict, output, loops: int):
    """Scroll the message once per loop (0 = forever)."""
    scroller = TextScroll(message, ScrollOptions.from_config(config), on_render=output.show)
    loop_count = 0
    while loops == 0 or loop_count < loops:
        scroller.reset()
        await scroller.scroll()
        loop_count += 1


async def run_infinite(message: str, config: dict, output):
    """Wrap the message forever, stopping cleanly on cancellation."""
    scroller = InfiniteTextScroll(message, InfiniteScrollOptions.from_config(config), output.show)
    scroller.start()
    try:
        await scroller.wait()
    finally:
        scroller.stop()


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Load configuration
    try:
        config = load_config()
    except FileNotFoundError:
        print("Error: config/settings.json not found!")
        print("Make sure you're running from the project root directory.")
        sys.exit(1)
    except Exception as e:
        print(f"Error loading config: {e}")
        sys.exit(1)

    config = apply_overrides(args, config)
    scroller_config = config["text_scroller"]

    message = args.message
    if message is None:
        message = scroller_config.get("default_text", "Hello World!")

    # Create output
    try:
        output = create_output(args, config)
    except Exception as e:
        print(f"Error initializing output: {e}")
        if args.output == "led":
            print("Make sure you're running with sudo and the hardware is connected.")
        sys.exit(1)

    print(f"Scrolling text: {message}")
    print(f"Mode: {scroller_config['mode']}")
    print("Press Ctrl+C to exit")

    try:
        if scroller_config["mode"] == "infinite":
            asyncio.run(run_infinite(message, config, output))
        else:
            asyncio.run(run_bounded(message, config, output, args.loops))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        output.clear()

    print("\nDisplay stopped.")


if __name__ == "__main__":
    main()
