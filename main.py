#!/usr/bin/env python3
"""
MTG Deck Archetype Analyzer
===========================

A tool to analyze a constructed Magic: The Gathering deck: its mana curve,
colors, synergies, mana base, archetype, matchups and overall health.

Usage:
    python main.py [decklist_file] [sideboard_file]
    python main.py --learn

    If no file is provided, the program will prompt you to paste
    your decklist directly.

Requirements:
    pip install requests python-dotenv numpy scikit-learn

Environment Variables:
    ARCHETYPE_MODEL_PATH - Where learned archetype clusters are stored
                           (default: learned_archetypes.json)

Examples:
    # Analyze a deck file
    python main.py my_deck.txt

    # Analyze a deck with a separate sideboard file
    python main.py my_deck.txt my_sideboard.txt

    # Learn archetype clusters from the known metagame decks
    python main.py --learn

    # Paste a deck interactively
    python main.py
"""

import sys
from typing import List, Optional, Tuple

from dotenv import load_dotenv

load_dotenv(override=True)  # Override any existing env vars with .env values

# Import our modules (after .env is loaded so config picks it up)
from archetype_learner import ModelPersistenceError
from config import COLOR_NAMES
from deck_analyzer import DeckAnalysis, DeckAnalyzer, EmptyDeckError
from scryfall_client import parse_decklist
from sideboard import SideboardAnalysis


# =============================================================================
# Display Functions
# =============================================================================

def print_banner():
    """Print the app banner."""
    print("""
╔═══════════════════════════════════════════════════════════════╗
║                                                               ║
║          🔮  MTG Deck Archetype Analyzer  🔮                   ║
║                                                               ║
║    Curve, colors, synergies, mana base and archetype          ║
║    for your constructed decks                                 ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
""")


def print_section_header(title: str):
    """Print a formatted section header."""
    print("\n" + "═" * 64)
    print(f"  {title}".center(64))
    print("═" * 64)


def print_analysis_results(deck: DeckAnalysis):
    """
    Print the analysis results in a formatted way.
    """
    profile = deck.profile

    # Archetype (big and prominent)
    print_section_header(f"📋 ARCHETYPE: {deck.archetype}")

    color_names = ", ".join(COLOR_NAMES[c] for c in deck.colors) or "Colorless"
    print(f"""
       Colors: {color_names}
       Cards analyzed: {deck.total_cards}
       Deck health: {deck.deck_health.score}/100 (grade {deck.deck_health.grade})
    """)

    if deck.unresolved_cards:
        print("  ⚠️  Cards not found on Scryfall:")
        for name in deck.unresolved_cards:
            print(f"    • {name}")

    # Mana curve
    print_section_header("📈 MANA CURVE")
    distribution = profile.curve.distribution
    max_count = max(distribution.values()) if any(distribution.values()) else 1

    for mv in sorted(distribution.keys()):
        count = distribution[mv]
        bar_length = int((count / max_count) * 20)
        bar = "█" * bar_length
        mv_label = f"{mv}+" if mv == 7 else f"{mv} "
        print(f"    {mv_label} │ {bar} ({count})")
    print(f"\n  Average mana value (non-land): {profile.curve.average_mana_value:.2f}")

    # Card composition summary
    print_section_header("📦 CARD COMPOSITION")
    types = profile.card_types
    print(f"""
    Creatures:     {types.get('creature', 0):3d}
    Artifacts:     {types.get('artifact', 0):3d}
    Enchantments:  {types.get('enchantment', 0):3d}
    Instants:      {types.get('instant', 0):3d}
    Sorceries:     {types.get('sorcery', 0):3d}
    Planeswalkers: {types.get('planeswalker', 0):3d}
    Lands:         {types.get('land', 0):3d}
""")

    # Synergies
    print_section_header("🔗 SYNERGIES")
    if profile.synergies:
        for tag in profile.synergies:
            print(f"    • {tag}")
    else:
        print("    None detected")

    # Consistency
    print_section_header("🎲 CONSISTENCY")
    consistency = profile.consistency
    print(f"    Score: {consistency.score}/100")
    print(f"    Unique cards: {consistency.unique_cards} of {consistency.total_cards}")
    for key, count in consistency.multiples.items():
        print(f"    {key:>2} copies: {count}")

    # Mana base
    manabase = profile.manabase
    print_section_header(f"⛰️  MANA BASE (grade {manabase.grade})")
    print(f"    Lands: {manabase.total_lands} ({manabase.land_ratio_percent}% of the deck)")
    print(f"    Recommended lands: {manabase.recommended_land_count}")
    for land_type, count in manabase.land_types.items():
        if count:
            print(f"    {land_type.capitalize():<10} {count}")
    for note in manabase.notes:
        print(f"    → {note}")

    # Matchups
    print_section_header("⚔️  MATCHUPS")
    if deck.matchups.family:
        print(f"    Favorable:   {', '.join(deck.matchups.favorable)}")
        print(f"    Challenging: {', '.join(deck.matchups.challenging)}")
    else:
        print("    No matchup data for this archetype")

    meta = deck.meta_matchups
    if meta.similarity:
        print("\n  Similarity to known metagame decks:")
        for name, score in sorted(meta.similarity.items(), key=lambda item: item[1], reverse=True):
            print(f"    {name:<20} {score:.3f}")
        if meta.closest:
            print(f"\n  Closest known deck: {meta.closest}")

    # Health feedback
    print_section_header("🩺 DECK HEALTH")
    for line in deck.deck_health.feedback:
        print(f"    {line}")

    # Recommendations
    print_section_header("💡 RECOMMENDATIONS")
    print(f"  {deck.recommendations}")


def print_sideboard_results(sideboard: SideboardAnalysis):
    """Print the sideboard analysis."""
    print_section_header(f"🧰 SIDEBOARD ({sideboard.total_cards} cards)")

    for purpose, names in sideboard.purposes.items():
        if names:
            print(f"    {purpose.replace('_', ' ').capitalize():<28} {len(names)}")

    print()
    for note in sideboard.strategy:
        print(f"  {note}")
    for rec in sideboard.recommendations:
        print(f"    • {rec}")


# =============================================================================
# Input Functions
# =============================================================================

def get_decklist_from_user() -> str:
    """
    Prompt the user to paste their decklist.

    Returns the decklist text.
    """
    print("\n📝 Paste your decklist below.")
    print("   (One card per line, e.g., '4 Lightning Bolt' or '4x Lightning Bolt')")
    print("   Put 'Sideboard' on its own line before sideboard cards.")
    print("   Press Enter twice when done.\n")

    lines = []
    empty_count = 0

    while True:
        try:
            line = input()
            if line.strip() == "":
                empty_count += 1
                if empty_count >= 2:
                    break
            else:
                empty_count = 0
                lines.append(line)
        except EOFError:
            break

    return "\n".join(lines)


def read_text_file(filename: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Read a decklist file.

    Returns:
        Tuple of (text, error_message)
        If successful, error_message is None
    """
    try:
        with open(filename, "r", encoding="utf-8") as f:
            text = f.read()
        print(f"   ✅ Loaded {len(text.splitlines())} lines")
        return text, None
    except FileNotFoundError:
        return None, f"File not found: {filename}"
    except OSError as e:
        return None, f"Error reading file: {e}"


# =============================================================================
# Actions
# =============================================================================

def run_analysis(analyzer: DeckAnalyzer, main_deck: List[str], sideboard: List[str]) -> int:
    """Analyze a deck (and its sideboard) and print everything."""
    try:
        deck = analyzer.analyze(main_deck)
    except EmptyDeckError:
        print("\n  ❌ The decklist doesn't contain any cards.")
        return 1

    print_analysis_results(deck)

    sideboard_analysis = analyzer.analyze_sideboard(sideboard, deck)
    if sideboard_analysis:
        print_sideboard_results(sideboard_analysis)

    # Learned clusters are optional; only shown once a model exists
    cluster = analyzer.classify_deck(main_deck)["cluster"]
    print_section_header("🧠 LEARNED ARCHETYPE CLUSTER")
    if isinstance(cluster, int):
        print(f"    Cluster #{cluster}")
    else:
        print("    No learned model yet - run 'python main.py --learn' first")

    return 0


def run_learning(analyzer: DeckAnalyzer) -> int:
    """Learn archetype clusters from the default reference decks."""
    try:
        model = analyzer.learn_clusters()
    except ModelPersistenceError as e:
        print(f"  ❌ {e}")
        return 1

    if model is None:
        return 1

    print(f"\n  🎉 Learned {model.k} archetype cluster(s)")
    return 0


# =============================================================================
# Entry Point
# =============================================================================

def main() -> int:
    """
    Main entry point for the deck analyzer.
    """
    print_banner()
    args = sys.argv[1:]
    analyzer = DeckAnalyzer()

    if "--learn" in args:
        return run_learning(analyzer)

    if args:
        filename = args[0]
        print(f"📂 Reading decklist from: {filename}")
        text, error = read_text_file(filename)
        if error:
            print(f"   ❌ {error}")
            return 1
    else:
        text = get_decklist_from_user()

    sections = parse_decklist(text or "")

    # A separate sideboard file replaces any sideboard in the decklist
    if len(args) > 1:
        print(f"📂 Reading sideboard from: {args[1]}")
        sideboard_text, error = read_text_file(args[1])
        if error:
            print(f"   ❌ {error}")
            return 1
        sideboard_sections = parse_decklist(sideboard_text)
        sections["sideboard"] = sideboard_sections["main"] + sideboard_sections["sideboard"]

    return run_analysis(analyzer, sections["main"], sections["sideboard"])


if __name__ == "__main__":
    sys.exit(main())
