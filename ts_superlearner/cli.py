"""
Command-line interface for ts_superlearner with subcommands.
"""

import logging
from pathlib import Path

import click
import pandas as pd

from .core.config import SuperLearnerConfig
from .core.folds import make_folds
from .core.losses import get_loss
from .core.super_learner import SuperLearner
from .data.dataset import load_demo_task
from .models.model_factory import create_learner
from .utils.logging_utils import setup_logging
from .utils.model_persistence import save_fit

logger = logging.getLogger(__name__)


def _echo_results(fit, loss_name):
    loss_fn = get_loss(loss_name)
    click.echo("\nCROSS-VALIDATED RISK")
    click.echo("=" * 60)
    click.echo(fit.cv_risk_table(loss_fn).to_string(index=False))

    coefficients = fit.coefficients
    if coefficients is not None:
        click.echo("\nMETALEARNER COEFFICIENTS")
        click.echo("=" * 60)
        click.echo(coefficients.to_string())


@click.group()
def cli():
    """Time-series Super Learner CLI"""
    pass


@cli.command()
@click.argument('n', type=int)
@click.option('--strategy', type=click.Choice(['rolling_origin', 'rolling_window']),
              default='rolling_origin', help='Fold strategy')
@click.option('--first-window', type=int, help='Initial training size (rolling_origin)')
@click.option('--window-size', type=int, help='Training window size (rolling_window)')
@click.option('--validation-size', type=int, default=1, help='Validation window size')
@click.option('--gap', type=int, default=0, help='Observations skipped between training and validation')
@click.option('--batch', type=int, default=1, help='Origin advance per fold')
def folds(n, strategy, first_window, window_size, validation_size, gap, batch):
    """Show the folds generated for a series of length N"""
    try:
        params = {'validation_size': validation_size, 'gap': gap, 'batch': batch}
        if strategy == 'rolling_origin':
            params['first_window'] = first_window
        else:
            params['window_size'] = window_size

        fold_set = make_folds(n, strategy, params)
        click.echo(f"{len(fold_set)} {strategy} folds for n={n}")
        click.echo(fold_set.summary().to_string(index=False))

    except Exception as e:
        click.echo(f"Fold generation failed: {e}")
        raise


@cli.command()
@click.option('--config', 'config_path', required=True, help='Config file path')
@click.option('--data', 'data_path', required=True, help='CSV file with the series, in temporal order')
@click.option('--index-col', default=None, help='Column to use as the row index')
@click.option('--output', help='Write Super Learner predictions to this CSV file')
@click.option('--save-fit', 'fit_dir', help='Directory to save the trained fit into')
@click.option('--log-file', help='Also log to this file')
@click.option('--verbose', is_flag=True, help='Enable debug logging')
@click.option('--quiet', is_flag=True, help='Only log warnings and errors')
def run(config_path, data_path, index_col, output, fit_dir, log_file, verbose, quiet):
    """Train a Super Learner described by a JSON config"""
    setup_logging(log_file_path=log_file, verbose=verbose, quiet=quiet)
    try:
        config = SuperLearnerConfig.from_file(config_path)
        config.set_seeds()

        frame = pd.read_csv(data_path, index_col=index_col)
        task = config.build_task(frame)
        click.echo(f"Loaded {len(task)} rows from {data_path} with {len(task.folds)} folds")

        super_learner = config.build_super_learner()
        fit = super_learner.train(task)
        _echo_results(fit, config.loss)

        if output:
            Path(output).parent.mkdir(parents=True, exist_ok=True)
            fit.predict().to_csv(output)
            click.echo(f"Predictions written to {output}")

        if fit_dir:
            save_fit(fit, fit_dir)
            click.echo(f"Fit saved to {fit_dir}")

        click.echo("Super Learner completed successfully!")

    except Exception as e:
        click.echo(f"Super Learner failed: {e}")
        raise


@cli.command()
@click.option('--n', default=200, type=int, help='Length of the synthetic series')
@click.option('--seed', default=1337, type=int, help='Random seed of the synthetic series')
@click.option('--n-jobs', default=1, type=int, help='Threads for stack members and folds')
@click.option('--verbose', is_flag=True, help='Enable debug logging')
def demo(n, seed, n_jobs, verbose):
    """Run a Super Learner on a synthetic autoregressive series"""
    setup_logging(verbose=verbose, quiet=not verbose)
    try:
        task = load_demo_task(n=n, seed=seed)
        learners = [
            create_learner('mean'),
            create_learner('glm'),
            create_learner('arima', order=(1, 0, 0)),
        ]
        fit = SuperLearner(learners, n_jobs=n_jobs).train(task)
        click.echo(f"Demo series: {len(task)} rows, {len(task.folds)} folds")
        _echo_results(fit, 'squared_error')

    except Exception as e:
        click.echo(f"Demo failed: {e}")
        raise


if __name__ == '__main__':
    cli()
