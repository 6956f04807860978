#!/usr/bin/env python3
"""
Analyze sandbox debug logs to spot AI tuning problems.

Usage:
    python tools/analyze_match_log.py <log_file_path>
"""

import re
import sys
from collections import Counter, defaultdict
from pathlib import Path


def parse_log_file(log_path):
    """Parse the debug log and extract key metrics."""

    event_types = Counter()
    errors = Counter()
    shots = []
    passes = []
    possessions = []
    goals = []
    stationary = []
    player_decisions = defaultdict(Counter)

    with open(log_path, 'r', encoding='utf-8') as f:
        for line in f:
            error = re.search(r'ERROR: Type: (\w+)', line)
            if error:
                errors[error.group(1)] += 1
                continue

            decision = re.search(r'DECISION: Time: ([\d.]+)s \| (\w+ [\w-]+) \| (\w+)', line)
            if decision:
                _, label, action = decision.groups()
                player_decisions[label][action] += 1
                continue

            match = re.search(r'Time: ([\d.]+)s \| Event: (\w+) \| Details: (.+)$', line)
            if not match:
                continue

            time, event_type, details = match.groups()
            time = float(time)
            event_types[event_type] += 1

            if event_type == 'SHOT':
                shots.append((time, details))
            elif event_type == 'PASS':
                passes.append((time, details))
            elif event_type == 'POSSESSION':
                possessions.append((time, details))
            elif event_type == 'GOAL':
                goals.append((time, details))
            elif event_type == 'BALL_STATIONARY':
                stationary.append((time, details))

    return {
        'event_types': event_types,
        'errors': errors,
        'shots': shots,
        'passes': passes,
        'possessions': possessions,
        'goals': goals,
        'stationary': stationary,
        'player_decisions': player_decisions,
    }


def analyze_shooting_behavior(shots, goals):
    """Summarise shots and goals per team."""
    print("\n=== SHOOTING ANALYSIS ===")
    print(f"Total shots: {len(shots)}  Goals: {len(goals)}")

    if not shots:
        print("  ⚠️  No shots detected - strikers may never reach shooting range")
        return

    per_team = Counter(details.split()[0] for _, details in shots)
    for team, count in per_team.most_common():
        print(f"  {team}: {count} shots")

    forces = [float(m.group(1)) for _, d in shots for m in [re.search(r'force=([\d.]+)', d)] if m]
    if forces:
        print(f"  Average shot impulse: {sum(forces) / len(forces):.2f}")


def analyze_passing_behavior(passes):
    """Summarise passes and how many went into space."""
    print("\n=== PASSING ANALYSIS ===")
    print(f"Total passes: {len(passes)}")

    if not passes:
        print("  ⚠️  No passes detected - carriers may be dribbling until forced to release")
        return

    into_space = sum(1 for _, details in passes if '-> space' in details)
    print(f"  Passes into space: {into_space} ({into_space / len(passes) * 100:.1f}%)")


def analyze_possession_sequences(possessions, stationary):
    """Analyze possession changes and idle balls."""
    print("\n=== POSSESSION ANALYSIS ===")
    print(f"Total possession changes: {len(possessions)}")
    print(f"Stationary ball episodes: {len(stationary)}")

    if len(possessions) < 2:
        print("  ⚠️  Very few possession changes")
        return

    times = [t for t, _ in possessions]
    durations = [times[i + 1] - times[i] for i in range(len(times) - 1)]
    print(f"  Average time between changes: {sum(durations) / len(durations):.1f}s")

    turnovers = 0
    for _, details in possessions:
        teams = re.findall(r'\b(red|blue)\b', details)
        if len(teams) == 2 and teams[0] != teams[1]:
            turnovers += 1
    print(f"  Turnovers: {turnovers}")


def analyze_player_activity(player_decisions):
    """Show the most frequent decision per agent."""
    print("\n=== DECISION ANALYSIS ===")
    for label in sorted(player_decisions):
        counts = player_decisions[label]
        action, count = counts.most_common(1)[0]
        print(f"  {label}: {sum(counts.values())} logged, mostly {action} ({count})")


def main():
    if len(sys.argv) < 2:
        print("Usage: python tools/analyze_match_log.py <log_file_path>")
        print("\nExample:")
        print("  python tools/analyze_match_log.py debug_logs/ai_debug_20250101_120000.txt")
        sys.exit(1)

    log_path = Path(sys.argv[1])

    if not log_path.exists():
        print(f"Error: Log file not found: {log_path}")
        sys.exit(1)

    print(f"Analyzing: {log_path.name}")
    print("=" * 60)

    data = parse_log_file(log_path)

    print("\n=== EVENT SUMMARY ===")
    for event_type, count in data['event_types'].most_common(15):
        print(f"  {event_type}: {count}")
    for error_type, count in data['errors'].most_common():
        print(f"  ERROR {error_type}: {count}")

    analyze_shooting_behavior(data['shots'], data['goals'])
    analyze_passing_behavior(data['passes'])
    analyze_possession_sequences(data['possessions'], data['stationary'])
    analyze_player_activity(data['player_decisions'])

    print("\n" + "=" * 60)
    print("Analysis complete!")


if __name__ == '__main__':
    main()
