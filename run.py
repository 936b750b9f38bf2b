#!/usr/bin/env python3
"""
run.py - Main entry point for the Connect Four AI system
"""

import argparse
import os
import sys

from connect4ai.debug import debug, DebugLevel

# --- Utility Functions ---

def configure_debug(args):
    """Configure debug level based on args.debug or args.debug_level."""
    if args.debug:
        debug.configure(level=DebugLevel.DEBUG)
    else:
        debug.set_from_string(args.debug_level)

def load_model(model_path):
    """Load a saved network, or return None when no path is given."""
    from connect4ai.ai.dqn import DQNModel

    if not model_path:
        return None
    if not os.path.exists(model_path):
        print(f"Error: model file {model_path} not found")
        sys.exit(1)
    print(f"Loading model from {model_path}")
    return DQNModel.load(model_path)

def build_strategies(args):
    """Create the strategies for both seats from --p1/--p2."""
    from connect4ai.ai.strategies import Difficulty, create_strategy

    model = None
    if Difficulty.NORMAL.value in (args.p1, args.p2):
        if not args.model:
            print("Error: --model parameter required for the 'normal' opponent")
            sys.exit(1)
        model = load_model(args.model)

    seed = args.seed
    p1 = create_strategy(Difficulty(args.p1), model=model, seed=seed)
    p2 = create_strategy(Difficulty(args.p2), model=model,
                         seed=seed + 1 if seed is not None else None)
    return p1, p2

# --- Game Command Handlers ---

def handle_game_play(args):
    """Handle the 'game play' command."""
    from connect4ai.interfaces.cli import GameCLI

    p1, p2 = build_strategies(args)
    print(f"Starting a new Connect Four game: {args.p1} (X) vs {args.p2} (O)")
    delay = args.delay if p1 is not None or p2 is not None else 0.0
    GameCLI(move_delay=delay).play_game(p1, p2)

def handle_game_simulate(args):
    """Handle the 'game simulate' command."""
    from connect4ai.interfaces.cli import GameCLI

    if 'player' in (args.p1, args.p2):
        print("Error: simulate needs two computer players (not 'player')")
        sys.exit(1)

    p1, p2 = build_strategies(args)
    print(f"Simulating {args.games} games: {args.p1} vs {args.p2}")
    GameCLI().simulate(p1, p2, args.games)

def handle_game_command(args):
    """Handle the 'game' component commands."""
    configure_debug(args)
    if args.command == 'play':
        handle_game_play(args)
    elif args.command == 'simulate':
        handle_game_simulate(args)

# --- AI Command Handlers ---

def build_training_config(args):
    """Build a TrainingConfig from the training options (raises ValueError if out of range)."""
    from connect4ai.ai.config import TrainingConfig

    return TrainingConfig(
        num_episodes=args.episodes,
        replay_buffer_size=args.replay_buffer_size,
        batch_size=args.batch_size,
        learning_rate=args.learning_rate,
        sync_every_frames=args.sync_every_frames,
        model_dir=args.model_dir,
        save_interval=args.save_interval,
        seed=args.seed,
    )

def handle_ai_train(args):
    """Handle the 'ai train' command."""
    from connect4ai.ai.agent import DQNAgent
    from connect4ai.ai.trainer import Trainer
    from connect4ai.data.data_manager import JobRegistry

    try:
        config = build_training_config(args)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    agent = None
    if args.model:
        agent = DQNAgent(config=config, online_network=load_model(args.model))

    trainer = Trainer(config=config, agent=agent, registry=JobRegistry(args.data_dir))
    print(f"Starting training with {config.num_episodes} episodes")

    try:
        summary = trainer.train()
        print(f"Created training job with ID: {summary['job_id']}")
        print(f"Training completed. Model saved to {summary['model_path']}")
        print(f"Average reward (last {config.average_window}): {summary['average_reward']:.2f}")
    except KeyboardInterrupt:
        print("\nTraining interrupted. Saving current model...")
        path = trainer.interrupt()
        print(f"Model saved to {path}. Exiting.")

def handle_ai_jobs(args):
    """Handle the 'ai jobs' command."""
    from connect4ai.data.data_manager import JobRegistry

    registry = JobRegistry(args.data_dir)

    if args.job_id is not None:
        job = registry.get_job_data(args.job_id)
        if not job:
            print(f"Job {args.job_id} not found")
            return
        print(f"Job {args.job_id} Details:")
        print(f"Started: {job['start_time']}")
        print(f"Status: {job['status']}")
        print(f"Episodes: {job['episodes_completed']}/{job['total_episodes']}")
        if job['end_time']:
            print(f"Completed: {job['end_time']}")
        print("\nTraining Parameters:")
        for key, value in job['parameters'].items():
            print(f"  {key}: {value}")
        print("\nRecent Episodes:")
        for log in registry.get_episode_logs(args.job_id)[-5:]:
            print(f"Episode {log['episode']}: Reward={log['reward']:.2f}, "
                  f"Average={log['average_reward']:.2f}, Epsilon={log['epsilon']:.3f}, "
                  f"Loss={log['loss']:.4f}")
        print("\nModels:")
        for model in registry.get_registered_models(args.job_id):
            label = " (final)" if model['is_final'] else ""
            print(f"  Episode {model['episode']}: {model['path']}{label}")
    else:
        jobs = registry.get_job_data()
        print(f"Found {len(jobs)} training jobs:")
        for job in jobs:
            progress = f"{job['episodes_completed']}/{job['total_episodes']}"
            print(f"Job {job['job_id']}: {job['status']}, Progress: {progress}")
        print("\nUse 'python run.py ai jobs --job_id <id>' to view job details")

def handle_ai_command(args):
    """Handle the 'ai' component commands."""
    configure_debug(args)
    if args.command == 'train':
        handle_ai_train(args)
    elif args.command == 'jobs':
        handle_ai_jobs(args)

# --- Main Entry Point ---

def add_debug_arguments(parser):
    parser.add_argument('--debug',
        action='store_true',
        help='Enable debug mode (equivalent to --debug_level debug)')
    parser.add_argument('--debug_level',
        choices=['none', 'error', 'warning', 'info', 'debug', 'trace'],
        default='error',
        help='Set debug level: none (silent), error, warning, info, debug, trace (most verbose)')

def main():
    """Main entry point for the Connect Four AI system."""
    parser = argparse.ArgumentParser(
        description='Connect Four AI',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
    Examples:

    GAME COMPONENT:
    ---------------
    # Play against the 4-ply minimax opponent
    python run.py game play --p1 player --p2 expert

    # Two human players
    python run.py game play --p1 player --p2 player

    # Play against a trained network
    python run.py game play --p1 player --p2 normal --model models/final_model_TIMESTAMP.pt

    # Compare two opponents over 100 games
    python run.py game simulate --p1 easy --p2 hard --games 100

    AI COMPONENT - TRAINING:
    ------------------------
    # Train the network for 1000 episodes
    python run.py ai train --episodes 1000

    # Continue training from an existing model, saving every 100 episodes
    python run.py ai train --episodes 2000 --model models/final_model_TIMESTAMP.pt --save_interval 100

    # Train with detailed logging
    python run.py ai train --episodes 100 --debug_level info

    AI COMPONENT - JOB MANAGEMENT:
    ------------------------------
    # View all training jobs
    python run.py ai jobs

    # View details of a specific job
    python run.py ai jobs --job_id 1
    """
    )

    subparsers = parser.add_subparsers(dest='component', help='Component to run')
    modes = ['player', 'rookie', 'easy', 'normal', 'hard', 'expert', 'extreme']

    game_parser = subparsers.add_parser('game',
        help='Play Connect Four',
        description='Play Connect Four or simulate computer-vs-computer games')
    game_parser.add_argument('command',
        choices=['play', 'simulate'],
        help='Game command: play (one game in the terminal), simulate (tally many games)')
    add_debug_arguments(game_parser)
    game_parser.add_argument('--p1',
        choices=modes,
        default='player',
        help='Player 1 (X): player (human), rookie (random), easy (1-ply minimax), '
             'normal (trained network), hard (2-ply), expert (4-ply), extreme (6-ply)')
    game_parser.add_argument('--p2',
        choices=modes,
        default='expert',
        help='Player 2 (O), same choices as --p1')
    game_parser.add_argument('--model',
        type=str,
        help='Saved model file for the normal opponent')
    game_parser.add_argument('--games',
        type=int,
        default=100,
        help='Number of games for simulate')
    game_parser.add_argument('--delay',
        type=float,
        default=0.5,
        help='Pause after each computer move in play, in seconds')
    game_parser.add_argument('--seed',
        type=int,
        default=None,
        help='Seed for the computer players\' random choices')

    ai_parser = subparsers.add_parser('ai',
        help='Run AI components',
        description='Train the Connect Four network or inspect training jobs')
    ai_parser.add_argument('command',
        choices=['train', 'jobs'],
        help="""AI commands:
        train: Train a model through self-play
        jobs: View training job information""")
    add_debug_arguments(ai_parser)
    ai_parser.add_argument('--model',
        type=str,
        help='Saved model file to continue training from')
    training_group = ai_parser.add_argument_group('Training options')
    training_group.add_argument('--episodes',
        type=int,
        default=1000,
        help='Number of episodes for training')
    training_group.add_argument('--batch_size',
        type=int,
        default=16,
        help='Transitions per gradient step')
    training_group.add_argument('--replay_buffer_size',
        type=int,
        default=10000,
        help='Replay memory capacity (filled before training starts)')
    training_group.add_argument('--learning_rate',
        type=float,
        default=1e-3,
        help='Adam learning rate')
    training_group.add_argument('--sync_every_frames',
        type=int,
        default=1000,
        help='Frames between target network syncs')
    training_group.add_argument('--model_dir',
        type=str,
        default='models',
        help='Directory for saved models')
    training_group.add_argument('--save_interval',
        type=int,
        default=0,
        help='Episodes between checkpoints (0 saves only the final model)')
    training_group.add_argument('--seed',
        type=int,
        default=None,
        help='Seed for random, numpy and torch')
    data_group = ai_parser.add_argument_group('Data options')
    data_group.add_argument('--job_id',
        type=int,
        help='Job ID to show (used with jobs command)')
    data_group.add_argument('--data_dir',
        type=str,
        default=None,
        help='Directory holding the job registry (default: ./data or $CONNECT4AI_DATA_DIR)')

    args = parser.parse_args()
    if args.component == 'game':
        handle_game_command(args)
    elif args.component == 'ai':
        handle_ai_command(args)
    else:
        parser.print_help()

if __name__ == "__main__":
    main()
