#!/usr/bin/env python3
"""
Render a simulated LLM Markdown stream incrementally.

Shows which fragments a renderer would repaint after each chunk: anything
whose key was not in the previous snapshot.

Usage:
    python examples/stream_markdown.py
"""

import anyio

from hother.markstream.streaming import StreamConfig, process_markdown_stream, simulate_stream
from hother.markstream.utils.logging import configure_logging, get_logger

configure_logging(log_level="INFO")
logger = get_logger(__name__)

DOCUMENT = """# Release notes

Version 2 brings a new renderer. ![diagram](https://example.com/arch.png "Architecture")

```python
parser = StreamingParser()
parser.append_chunk(token)
```

- Faster first paint
- [x] Stable keys for images

> Completed blocks are never re-rendered.
"""


async def main():
    config = StreamConfig(min_chunk_size=2, max_chunk_size=12, base_delay=0.02, jitter=0.01, jitter_probability=0.5, seed=7)

    async for update in process_markdown_stream(simulate_stream(DOCUMENT, config)):
        if not update.diff.has_changes:
            continue
        repaint = [fragment for fragment in update.fragments if fragment.key in update.diff.added]
        print(f"[{update.event_number:3d}] {update.update_type}: repaint {', '.join(str(f) for f in repaint)}")

    logger.info("Stream rendered", skipped_renders=len(update.diff.retained))


if __name__ == "__main__":
    anyio.run(main)
