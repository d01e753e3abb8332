#!/usr/bin/env python3
"""
Command-line client for the Z-Image API.

Usage:
    zimage generate --prompt <text> [--ratio 16:9] [--resolution 2K] [options]
    zimage upscale --session <id> --image <id> [--scale 4]
    zimage sessions list
    zimage sessions delete <id>

Generated images are recorded in a local flow history (see --store).
Provider tokens are read from ZIMAGE_GITEE_TOKEN, ZIMAGE_HF_TOKEN and
ZIMAGE_MS_TOKEN.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import time
import uuid
from typing import List, Optional, Sequence

import httpx

from ..client.api_client import ApiClientError, ZImageClient
from ..client.flow_storage import FlowInputSettings, FlowStorage, GeneratedImage, JsonFileStore
from ..models.catalog import ASPECT_RATIOS, PROVIDER_CONFIGS

DEFAULT_STORE_DIR = os.path.join("~", ".zimage")
RESOLUTIONS = ("1K", "2K")
TOKEN_ENV_VARS = {
    "gitee": "ZIMAGE_GITEE_TOKEN",
    "huggingface": "ZIMAGE_HF_TOKEN",
    "modelscope": "ZIMAGE_MS_TOKEN",
}


def _ratio_index(label: str) -> int:
    for index, ratio in enumerate(ASPECT_RATIOS):
        if ratio.label == label:
            return index
    raise ValueError(f"Unknown aspect ratio '{label}'")


def _load_tokens() -> dict:
    return {provider: os.getenv(env_var, "") for provider, env_var in TOKEN_ENV_VARS.items()}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="zimage",
        description="Generate and upscale images through the Z-Image API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--api", default=os.getenv("ZIMAGE_API_URL", "http://localhost:8000"),
                        help="API server root (default: %(default)s)")
    parser.add_argument("--store", default=os.getenv("ZIMAGE_STORE_DIR", DEFAULT_STORE_DIR),
                        help="Directory for local flow history (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate an image")
    generate.add_argument("--prompt", help="Prompt text (defaults to the last used prompt)")
    generate.add_argument("--ratio", choices=[r.label for r in ASPECT_RATIOS],
                          help="Aspect ratio (defaults to the last used one)")
    generate.add_argument("--resolution", choices=RESOLUTIONS,
                          help="Preset resolution (defaults to the last used one)")
    generate.add_argument("--provider", default="gitee", choices=sorted(PROVIDER_CONFIGS))
    generate.add_argument("--model", help="Provider model id")
    generate.add_argument("--negative-prompt")
    generate.add_argument("--steps", type=int)
    generate.add_argument("--seed", type=int)
    generate.add_argument("--guidance-scale", type=float)
    generate.add_argument("--session", help="Flow session id (a new session is created if omitted)")

    upscale = subparsers.add_parser("upscale", help="Upscale an image from a flow session")
    upscale.add_argument("--session", required=True)
    upscale.add_argument("--image", required=True, help="Generated image id")
    upscale.add_argument("--scale", type=float, default=4)

    sessions = subparsers.add_parser("sessions", help="Manage flow sessions")
    session_commands = sessions.add_subparsers(dest="session_command", required=True)
    session_commands.add_parser("list", help="List sessions")
    delete = session_commands.add_parser("delete", help="Delete a session")
    delete.add_argument("session_id")

    return parser.parse_args(argv)


async def run_generate(args: argparse.Namespace, storage: FlowStorage, client: ZImageClient) -> int:
    settings = storage.load_input_settings()
    prompt = args.prompt if args.prompt is not None else settings.prompt
    ratio_index = _ratio_index(args.ratio) if args.ratio else settings.aspect_ratio_index
    resolution_index = RESOLUTIONS.index(args.resolution) if args.resolution else settings.resolution_index

    if not 0 <= ratio_index < len(ASPECT_RATIOS):
        ratio_index = 0
    ratio = ASPECT_RATIOS[ratio_index]
    preset = ratio.presets[min(max(resolution_index, 0), len(ratio.presets) - 1)]

    if not prompt or not prompt.strip():
        print("❌ A prompt is required", file=sys.stderr)
        return 2

    storage.save_input_settings(FlowInputSettings(
        aspect_ratio_index=ratio_index,
        resolution_index=resolution_index,
        prompt=prompt,
    ))

    session = None
    if args.session:
        session = storage.get_session(args.session)
        if session is None:
            print(f"❌ Unknown session: {args.session}", file=sys.stderr)
            return 2

    start_time = time.time()
    result = await client.generate(
        prompt=prompt,
        provider=args.provider,
        model=args.model,
        width=preset.w,
        height=preset.h,
        negative_prompt=args.negative_prompt,
        steps=args.steps,
        seed=args.seed,
        guidance_scale=args.guidance_scale,
    )
    duration_ms = int((time.time() - start_time) * 1000)

    url = result.url or f"data:image/png;base64,{result.b64_json}"
    image = GeneratedImage(
        id=uuid.uuid4().hex,
        url=url,
        prompt=prompt,
        aspect_ratio=ratio.label,
        timestamp=int(time.time() * 1000),
        model=args.model or args.provider,
        seed=result.seed,
        duration=duration_ms,
    )
    # New sessions are only recorded once an image exists
    if session is None:
        session = storage.create_session()
    storage.update_session(session.id, [image, *session.images])

    print(f"✅ Generated {preset.w}x{preset.h} in {duration_ms / 1000:.1f}s")
    print(f"   session: {session.id}")
    print(f"   image:   {image.id}")
    print(f"   url:     {result.url or '(inline base64)'}")
    return 0


async def run_upscale(args: argparse.Namespace, storage: FlowStorage, client: ZImageClient) -> int:
    session = storage.get_session(args.session)
    if session is None:
        print(f"❌ Unknown session: {args.session}", file=sys.stderr)
        return 2

    images: List[GeneratedImage] = list(session.images)
    for index, image in enumerate(images):
        if image.id == args.image:
            break
    else:
        print(f"❌ Unknown image: {args.image}", file=sys.stderr)
        return 2

    upscaled_url = await client.upscale(image.url, args.scale)
    images[index] = image.model_copy(update={"url": upscaled_url, "is_upscaled": True})
    storage.update_session(session.id, images)
    print(f"✅ Upscaled x{args.scale:g}: {upscaled_url}")
    return 0


def run_sessions(args: argparse.Namespace, storage: FlowStorage) -> int:
    if args.session_command == "delete":
        storage.delete_session(args.session_id)
        print(f"🗑️  Deleted {args.session_id}")
        return 0

    sessions = storage.load_sessions()
    if not sessions:
        print("No sessions")
        return 0
    for session in sessions:
        print(f"{session.id:<20} {session.name:<28} {len(session.images):>3} image(s)")
    return 0


async def _run_remote(args: argparse.Namespace, storage: FlowStorage) -> int:
    async with ZImageClient(args.api, tokens=_load_tokens()) as client:
        if args.command == "generate":
            return await run_generate(args, storage, client)
        return await run_upscale(args, storage, client)


def main(argv: Optional[Sequence[str]] = None, storage: Optional[FlowStorage] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    storage = storage or FlowStorage(JsonFileStore(args.store))

    if args.command == "sessions":
        return run_sessions(args, storage)

    try:
        return asyncio.run(_run_remote(args, storage))
    except ApiClientError as e:
        print(f"❌ {e.message} (HTTP {e.status_code})", file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"❌ Cannot reach {args.api}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
