"""Caption parsing for YouTube subtitle tracks located by yt-dlp."""
import json
import re
from typing import List

from ..models.content import TranscriptSegment

VTT_TIME_PATTERN = re.compile(r'(\d{2}:\d{2}:\d{2}\.\d{3}) --> (\d{2}:\d{2}:\d{2}\.\d{3})')

# Caption formats in order of preference
SUPPORTED_FORMATS = ['json3', 'vtt']


def parse_subtitle_content(content: str, format_id: str) -> List[TranscriptSegment]:
    """Parse subtitle content based on format; unknown formats yield no segments."""
    if format_id == 'json3':
        return parse_json3(content)
    if format_id == 'vtt':
        return parse_vtt(content)
    return []


def parse_vtt(content: str) -> List[TranscriptSegment]:
    """Parse WebVTT subtitle content."""
    segments = []

    for block in re.split(r'\n\n+', content.replace('\r\n', '\n')):
        lines = block.strip().split('\n')
        if len(lines) < 2:
            continue

        time_match = None
        text_start_idx = 0
        for i, line in enumerate(lines):
            match = VTT_TIME_PATTERN.search(line)
            if match:
                time_match = match
                text_start_idx = i + 1
                break

        if not time_match or text_start_idx >= len(lines):
            continue

        start = vtt_time_to_seconds(time_match.group(1))
        end = vtt_time_to_seconds(time_match.group(2))
        text = clean_subtitle_text(' '.join(lines[text_start_idx:]))

        if text:
            segments.append(TranscriptSegment(text=text, start=start, duration=max(0.0, end - start)))

    return segments


def parse_json3(content: str) -> List[TranscriptSegment]:
    """Parse YouTube json3 caption content."""
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        return []

    segments = []
    for event in data.get('events', []) if isinstance(data, dict) else []:
        if 'tStartMs' not in event:
            continue
        text = clean_subtitle_text(''.join(seg.get('utf8', '') for seg in event.get('segs') or []))
        if text:
            segments.append(TranscriptSegment(
                text=text,
                start=event['tStartMs'] / 1000.0,
                duration=event.get('dDurationMs', 0) / 1000.0,
            ))
    return segments


def vtt_time_to_seconds(time_str: str) -> float:
    """Convert HH:MM:SS.mmm to seconds."""
    hours, minutes, rest = time_str.split(':')
    seconds, _, millis = rest.partition('.')
    return int(hours) * 3600 + int(minutes) * 60 + int(seconds) + int(millis or 0) / 1000.0


def clean_subtitle_text(text: str) -> str:
    """Strip markup and sound cues from a caption line."""
    if not text:
        return ""

    text = re.sub(r'<[^>]+>', '', text)

    text = text.replace('&lt;', '<')
    text = text.replace('&gt;', '>')
    text = text.replace('&quot;', '"')
    text = text.replace('&#39;', "'")
    text = text.replace('&amp;', '&')

    text = re.sub(r'♪.*?♪', '', text)    # music cues
    text = re.sub(r'\[.*?\]', '', text)  # sound descriptions

    return re.sub(r'\s+', ' ', text).strip()
