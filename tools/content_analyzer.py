#!/usr/bin/env python3
"""
Video Content Analyzer
Fetches a video's transcript and metadata and runs text heuristics over them

Heuristics:
1. Keyword extraction and spoken-duration estimate
2. Code snippet detection and extraction
3. DSA problem-type classification
4. Summary paragraphs and short notes
5. GitHub link extraction with best-effort code download

Usage:
    python3 -m tools.content_analyzer VIDEO_ID
"""

import os
import re
import sys
import json
import math
import logging
from pathlib import Path
from collections import Counter

from dotenv import load_dotenv

from tools.github_code import GitHubCodeFetcher, extract_github_link, resolve_github_code
from tools.youtube_fetch_channel_data import YouTubeChannelFetcher
from tools.youtube_transcripts import fetch_transcript_fragments, fetch_transcript_text

load_dotenv()

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 150
MAX_SHORT_NOTES = 5
MAX_SENTENCES_PER_PARAGRAPH = 4
TOPIC_WORDS = 3
TRANSCRIPT_PLACEHOLDER = "Transcript not available for this video."
SUMMARY_PLACEHOLDER = "Summary unavailable: transcript not available for this video."

STOP_WORDS = frozenset({
    'about', 'above', 'after', 'again', 'also', 'been', 'before', 'being', 'below', 'between',
    'both', 'could', 'does', 'doing', 'down', 'during', 'each', 'even', 'every', 'from',
    'further', 'gonna', 'have', 'having', 'here', 'into', 'just', 'know', 'like', 'many',
    'more', 'most', 'much', 'must', 'need', 'only', 'other', 'over', 'really', 'right',
    'same', 'should', 'some', 'such', 'than', 'that', 'their', 'them', 'then', 'there',
    'these', 'they', 'thing', 'things', 'this', 'those', 'through', 'under', 'until', 'very',
    'want', 'were', 'what', 'when', 'where', 'which', 'while', 'will', 'with', 'would',
    'yeah', 'your', 'yours', 'okay', 'going', 'because', 'make', 'well',
})

# (label, pattern, group holding the code); first family with a match wins
CODE_PATTERNS = (
    ('fenced_language', re.compile(r"```([A-Za-z0-9_+#-]+)[ \t]*\n([\s\S]*?)```"), 2),
    ('fenced', re.compile(r"```([\s\S]*?)```"), 1),
    ('inline', re.compile(r"`([^`\n]+)`"), 1),
    ('keyword', re.compile(
        r"\b((?:function|class|def|public|private|protected|static|const|let|var|void|return)"
        r"\s+[\w$]+[^.!?\n]*?[(){};=:][^.!?\n]*)"
    ), 1),
)

# Evaluated in order: several topics can match the same text
DSA_PATTERNS = (
    ('array', (
        r"\barrays?\b", r"\bsub-?arrays?\b", r"\btwo[- ]pointers?\b", r"\bsliding window\b", r"\bprefix sums?\b",
    )),
    ('linkedList', (
        r"\blinked[- ]?lists?\b", r"\bnext pointers?\b", r"\bhead node\b", r"\bdoubly\b",
    )),
    ('tree', (
        r"\bbinary trees?\b", r"\bbinary search trees?\b", r"\bbst\b", r"\btrees?\b",
        r"\b(?:in|pre|post)-?order\b", r"\bleaf nodes?\b", r"\broot node\b",
    )),
    ('graph', (
        r"\bgraphs?\b", r"\bbfs\b", r"\bdfs\b", r"\bbreadth[- ]first\b", r"\bdepth[- ]first\b",
        r"\bdijkstra\b", r"\bvertex\b", r"\bvertices\b", r"\btopological\b",
    )),
    ('sorting', (
        r"\bsort(?:s|ed|ing)?\b", r"\b(?:quick|merge|heap|bubble|insertion|selection)\s?sort\b",
    )),
    ('searching', (
        r"\bbinary search\b", r"\blinear search\b", r"\bsearch(?:es|ing)?\b", r"\blookup\b",
    )),
)
COMPILED_DSA_PATTERNS = tuple(
    (label, tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns))
    for label, patterns in DSA_PATTERNS
)

PROBLEM_TYPE_NAMES = {
    'array': 'Array',
    'linkedList': 'Linked List',
    'tree': 'Tree',
    'graph': 'Graph',
    'sorting': 'Sorting',
    'searching': 'Searching',
}


def extract_keywords(text, top_k=5):
    """Most frequent non-stopword words longer than 3 characters."""
    cleaned = re.sub(r"[^\w\s]", " ", (text or "").lower())
    words = [word for word in cleaned.split() if len(word) > 3 and word not in STOP_WORDS]
    return [word for word, _count in Counter(words).most_common(top_k)]


def estimate_duration_minutes(text):
    return math.ceil(len((text or "").split()) / WORDS_PER_MINUTE)


def detect_code(text):
    """Return ``(family, snippets)`` for the first pattern family that matches."""
    for label, pattern, group in CODE_PATTERNS:
        snippets = [match.group(group).strip() for match in pattern.finditer(text or "")]
        snippets = [snippet for snippet in snippets if snippet]
        if snippets:
            return label, snippets
    return '', []


def extract_code_snippets(text):
    return detect_code(text)[1]


def extract_actual_code(text):
    """Best single code block: the longest snippet, or keyword statements joined as one block."""
    family, snippets = detect_code(text)
    if not snippets:
        return ''
    if family == 'keyword':
        return "\n".join(snippets)
    return max(snippets, key=len)


def classify_problem_type(text):
    for label, patterns in COMPILED_DSA_PATTERNS:
        if any(pattern.search(text or "") for pattern in patterns):
            return label
    return ''


def split_sentences(text):
    sentences = re.findall(r"[^.!?]+[.!?]*", text or "")
    return [sentence.strip() for sentence in sentences if sentence.strip()]


def _topic(sentence):
    return " ".join(sentence.lower().split()[:TOPIC_WORDS])


def generate_summary(text):
    """
    Group sentences into paragraphs of up to four.

    A paragraph closes early when the leading three words change after at
    least three sentences were grouped. A lone paragraph is split in half so
    the summary always reads as two blocks when there is enough text.
    """
    sentences = split_sentences(text)
    paragraphs = []
    current = []
    previous_topic = None

    for sentence in sentences:
        topic = _topic(sentence)
        if current and (
            len(current) >= MAX_SENTENCES_PER_PARAGRAPH
            or (len(current) >= 3 and topic != previous_topic)
        ):
            paragraphs.append(current)
            current = []
        current.append(sentence)
        previous_topic = topic

    if current:
        paragraphs.append(current)

    if not paragraphs:
        paragraphs = [[(text or "").strip() or "No content available for summary."]]

    if len(paragraphs) == 1 and len(paragraphs[0]) > 1:
        only = paragraphs[0]
        middle = len(only) // 2
        paragraphs = [only[:middle], only[middle:]]

    return "**" + "\n\n".join(" ".join(paragraph) for paragraph in paragraphs) + "**"


def generate_short_notes(text):
    return [f"• {sentence}" for sentence in split_sentences(text)[:MAX_SHORT_NOTES]]


def compose_content_analysis(details):
    """Narrative made of blank-line separated sections, each led by a heading line."""
    sections = []

    if not details['transcriptAvailable']:
        sections.append(
            "⚠️ Error\n"
            "No transcript could be retrieved for this video, so no transcript analysis was performed."
        )

    sections.append(
        "📊 Video Overview\n"
        f"Title: {details['title']}\n"
        f"Published: {details['publishedAt'] or 'Unknown'}\n"
        f"Views: {details['viewCount']} | Likes: {details['likeCount']} | Comments: {details['commentCount']}"
    )

    keywords = details['keywords']
    sections.append("🔑 Key Topics\n" + (", ".join(keywords) if keywords else "No recurring topics detected"))

    sections.append(f"⏱️ Estimated Duration\n~{details['estimatedMinutes']} minute(s) of spoken content")

    problem_type = details['problemType']
    sections.append(
        "🧩 Problem Type\n"
        + (PROBLEM_TYPE_NAMES[problem_type] if problem_type else "No data-structure or algorithm topic detected")
    )

    snippet_count = len(details['codeSnippets'])
    sections.append(
        "💻 Code Detection\n"
        + (f"{snippet_count} code snippet(s) detected" if snippet_count else "No code snippets detected")
    )

    if details['githubUrl']:
        source_line = f"GitHub: {details['githubUrl']}"
        if details['githubFileType']:
            source_line += f" ({details['githubFileType']})"
    else:
        source_line = "No GitHub link found in the description"
    sections.append("🔗 Source Code\n" + source_line)

    if details['shortNotes']:
        sections.append("📝 Short Notes\n" + "\n".join(details['shortNotes']))

    return "\n\n".join(sections)


def degraded_report(reason):
    return {
        'title': '',
        'description': '',
        'publishedAt': '',
        'viewCount': '0',
        'likeCount': '0',
        'commentCount': '0',
        'transcript': TRANSCRIPT_PLACEHOLDER,
        'contentAnalysis': f"⚠️ Error\nUnable to analyze this video: {reason}",
        'shortNotes': [],
        'codeSnippets': [],
        'actualCode': '',
        'problemType': '',
        'summary': f"Summary unavailable: {reason}",
        'githubCode': None,
        'githubUrl': None,
        'githubFileType': None,
    }


class VideoContentAnalyzer:
    def __init__(self, metadata_provider=None, transcript_provider=None, github_fetcher=None):
        """
        metadata_provider: video_id -> YouTube Data API v3 ``videos`` resource
        transcript_provider: video_id -> ordered ``{text}`` caption fragments
        github_fetcher: object with ``fetch_text(url)`` and ``list_repository(owner, repo)``
        """
        self.metadata_provider = metadata_provider
        self.transcript_provider = transcript_provider or fetch_transcript_fragments
        self.github_fetcher = github_fetcher or GitHubCodeFetcher()

    @classmethod
    def from_api_key(cls, api_key, github_token=""):
        fetcher = YouTubeChannelFetcher(api_key)
        return cls(
            metadata_provider=fetcher.fetch_video_details,
            github_fetcher=GitHubCodeFetcher(token=github_token),
        )

    def analyze(self, video_id):
        """Always returns a complete report; failures become a degraded report."""
        try:
            return self._analyze(video_id)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Video analysis failed for %s: %s", video_id, exc)
            return degraded_report(exc)

    def _analyze(self, video_id):
        if self.metadata_provider is None:
            raise ValueError("No video metadata provider configured")

        transcript = fetch_transcript_text(video_id, self.transcript_provider)
        video = self.metadata_provider(video_id)

        snippet = video.get('snippet', {})
        statistics = video.get('statistics', {})
        title = snippet.get('title', '')
        description = snippet.get('description', '')

        analysis_text = transcript or ''

        code_snippets = extract_code_snippets(analysis_text)
        github_url = extract_github_link(description)
        if github_url:
            github = resolve_github_code(github_url, self.github_fetcher)
        else:
            github = {'githubCode': None, 'githubUrl': None, 'githubFileType': None}

        details = {
            'title': title,
            'description': description,
            'publishedAt': snippet.get('publishedAt', ''),
            'viewCount': statistics.get('viewCount', '0'),
            'likeCount': statistics.get('likeCount', '0'),
            'commentCount': statistics.get('commentCount', '0'),
            'transcriptAvailable': transcript is not None,
            'keywords': extract_keywords(analysis_text),
            'estimatedMinutes': estimate_duration_minutes(transcript),
            'problemType': classify_problem_type(analysis_text),
            'codeSnippets': code_snippets,
            'shortNotes': generate_short_notes(analysis_text),
            **github,
        }

        return {
            'title': title,
            'description': description,
            'publishedAt': details['publishedAt'],
            'viewCount': details['viewCount'],
            'likeCount': details['likeCount'],
            'commentCount': details['commentCount'],
            'transcript': transcript if transcript is not None else TRANSCRIPT_PLACEHOLDER,
            'contentAnalysis': compose_content_analysis(details),
            'shortNotes': details['shortNotes'],
            'codeSnippets': code_snippets,
            'actualCode': extract_actual_code(analysis_text),
            'problemType': details['problemType'],
            'summary': generate_summary(analysis_text) if transcript is not None else SUMMARY_PLACEHOLDER,
            'githubCode': github['githubCode'],
            'githubUrl': github['githubUrl'],
            'githubFileType': github['githubFileType'],
        }


def main():
    """Main execution function"""
    if len(sys.argv) != 2:
        print("❌ Error: Missing video ID")
        print("\nUsage:")
        print("  python3 -m tools.content_analyzer VIDEO_ID")
        sys.exit(1)

    video_id = sys.argv[1].strip()
    api_key = os.getenv('YOUTUBE_API_KEY')
    output_folder = os.getenv('OUTPUT_FOLDER', '.tmp/channel_analytics')

    if not api_key:
        print("❌ Error: YOUTUBE_API_KEY not found in .env file")
        sys.exit(1)

    logging.basicConfig(level=os.getenv('LOG_LEVEL', 'WARNING').upper())

    print(f"🔬 Analyzing video content: {video_id}")
    analyzer = VideoContentAnalyzer.from_api_key(api_key, github_token=os.getenv('GITHUB_TOKEN', ''))
    report = analyzer.analyze(video_id)

    output_dir = Path(output_folder) / 'videos'
    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / f"video_{video_id}_analysis.json"
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    print(f"   Problem type: {report['problemType'] or 'n/a'}")
    print(f"   Code snippets: {len(report['codeSnippets'])}")
    print(f"   GitHub: {report['githubUrl'] or 'n/a'}")
    print(f"\n📁 Analysis saved to: {output_file}")


if __name__ == '__main__':
    main()
