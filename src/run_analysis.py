#!/usr/bin/env python3
"""Command line runner for app analysis and direct keyword scoring.

Usage:
    python run_analysis.py 310633997
    python run_analysis.py 310633997 --ai-provider claude
    python run_analysis.py --keywords "chat" "video call" --top 5
    python run_analysis.py --config
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict

from dotenv import load_dotenv
from tabulate import tabulate

from agent.graph import run_app_analysis
from lib.aso_service_client import ASOServiceClient
from lib.errors import ASOAnalyzerError
from lib.keyword_scoring import ASOAnalyzer
from lib.provider_factory import AIProviderFactory
from service.settings import Settings


def print_config(settings: Settings):
    print("\nCurrent Environment Configuration:")
    print("==================================")
    for key, value in AIProviderFactory(settings).environment_config().items():
        print(f"{key}: {value}")
    print("==================================\n")


def print_scores(scores):
    headers = ["Keyword", "Traffic", "Difficulty", "Competition", "Recommendation"]
    rows = [
        [s.keyword, s.traffic_score, s.difficulty_score, s.competition_level.value, s.recommendation.value]
        for s in scores
    ]
    print(tabulate(rows, headers=headers, tablefmt="simple", numalign="right", stralign="left"))


async def score_keywords(keywords, settings: Settings, top_n: int):
    async with ASOServiceClient(settings.ASO_SERVICE_URL, timeout=settings.REQUEST_TIMEOUT_SECONDS) as lookup:
        analyzer = ASOAnalyzer(lookup, platform=settings.ASO_PLATFORM, delay_seconds=settings.SCORING_DELAY_SECONDS)
        return await analyzer.find_keyword_opportunities(keywords, top_n=top_n)


def main():
    parser = argparse.ArgumentParser(
        description="ASO Keyword Analyzer - App Store keyword research & analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_analysis.py 310633997                      # Use default provider (Gemini)
  python run_analysis.py 310633997 --ai-provider claude # Use Claude
  python run_analysis.py --keywords chat "video call"   # Score keywords directly
  python run_analysis.py --config                       # Show current configuration
        """,
    )
    parser.add_argument("app_id", nargs="?", help="App Store track ID (numeric)")
    parser.add_argument("-p", "--ai-provider", help="AI provider to use (gemini, claude)")
    parser.add_argument("-k", "--keywords", nargs="+", help="Score these keywords instead of analyzing an app")
    parser.add_argument("--top", type=int, default=10, help="Number of top keyword opportunities to show")
    parser.add_argument("--config", action="store_true", help="Show current configuration")
    parser.add_argument("--json", action="store_true", help="Output as JSON")

    args = parser.parse_args()

    load_dotenv()
    settings = Settings()
    logging.basicConfig(level=settings.LOG_LEVEL, stream=sys.stderr)

    if args.config:
        print_config(settings)
        return

    try:
        if args.keywords:
            opportunities = asyncio.run(score_keywords(args.keywords, settings, args.top))
            if args.json:
                print(json.dumps(asdict(opportunities), indent=2))
            else:
                print(f"\n📊 Top keyword opportunities ({opportunities.total_analyzed} analyzed):")
                print_scores(opportunities.top_opportunities)
                print(f"\nSummary: {opportunities.summary}")
            return

        if not args.app_id:
            parser.error("Provide an app ID or --keywords")

        factory = AIProviderFactory(settings)
        provider = factory.resolve(args.ai_provider)
        validation = factory.validate(provider)
        if not validation.success:
            print(f"❌ {validation.message}", file=sys.stderr)
            print("Please check your environment variables and try again.", file=sys.stderr)
            sys.exit(1)

        print(f"🤖 AI Provider: {provider.upper()}", file=sys.stderr)
        result = asyncio.run(run_app_analysis(args.app_id, provider, settings))
    except ASOAnalyzerError as e:
        print(f"❌ Analysis failed: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(asdict(result), indent=2))
        return

    print(f"\n📋 {result.app_data.title}")
    print(f"📋 Similar apps analyzed: {', '.join(app.title for app in result.similar_apps) or 'none'}")
    print(f"🧠 Main app keywords: {', '.join(result.main_app_keywords)}")
    print(f"🧠 Similar app keywords: {', '.join(result.similar_app_keywords)}")
    print(f"\n📊 Sampled keyword analysis:")
    print_scores(result.keyword_analysis)


if __name__ == "__main__":
    main()
