# catchlog/cli.py
"""
운영자용 Flask CLI 명령.

    flask --app run reconcile-counters            # 모든 게시물
    flask --app run reconcile-counters ID1 ID2    # 지정한 게시물만

좋아요/댓글 레코드 수를 다시 세어 게시물의 likes_count / comments_count 를 덮어씁니다.
카운터 조정 실패(ConsistencyWarning) 이후 수동 복구에 사용합니다.
"""
import click
from flask import Flask, current_app
from flask.cli import with_appcontext


@click.command('reconcile-counters')
@click.argument('report_ids', nargs=-1)
@with_appcontext
def reconcile_counters_command(report_ids):
    """게시물 카운터를 원장 기준으로 재계산합니다."""
    synchronizer = current_app.services['counters']
    if not report_ids:
        total = synchronizer.reconcile_all()
        click.echo(f"{total}개 게시물의 카운터를 재계산했습니다.")
        return

    for report_id in report_ids:
        likes, comments = synchronizer.reconcile(report_id)
        click.echo(f"{report_id}: likes_count={likes}, comments_count={comments}")


def register_commands(app: Flask) -> None:
    app.cli.add_command(reconcile_counters_command)
