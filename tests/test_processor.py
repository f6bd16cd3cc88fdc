"""Tests for full processor runs across many leagues."""

from datetime import datetime

from golfleague.processor import (
    PHASE_ACTIVATION,
    PHASE_REMINDERS,
    PHASE_STARTING,
    PHASE_WEEK_COMPLETION,
    LeagueProcessor,
    process_leagues,
)
from golfleague.store import InMemoryStore

from conftest import WEDNESDAY_6AM, make_league, make_member, make_score


def many_leagues_store():
    members = {'a': make_member('A'), 'b': make_member('B')}
    return InMemoryStore(
        {
            'leagues': {
                'tomorrow': make_league(status='upcoming', startDate='2026-06-11', playDay='saturday'),
                'today': make_league(status='upcoming', startDate='2026-06-10', playDay='saturday'),
                'weekly': make_league(),
                'cancelled': make_league(status='cancelled'),
                'done': make_league(status='completed'),
                'friday': make_league(playDay='friday'),
            },
            'members': {league_id: dict(members) for league_id in
                        ('tomorrow', 'today', 'weekly', 'cancelled', 'done', 'friday')},
            'scores': {
                league_id: {'s1': make_score('a', 1, 70), 's2': make_score('b', 1, 75)}
                for league_id in ('weekly', 'cancelled', 'done', 'friday')
            },
        }
    )


class TestLeagueProcessor:
    """Tests for LeagueProcessor.run."""

    def test_phases(self):
        store = many_leagues_store()
        report = LeagueProcessor(store).run(WEDNESDAY_6AM)

        assert report.phases[PHASE_STARTING].processed == ['tomorrow']
        assert report.phases[PHASE_ACTIVATION].processed == ['today']
        assert report.phases[PHASE_WEEK_COMPLETION].processed == ['weekly']
        assert report.failed == []

        assert store.get_league('tomorrow')['status'] == 'upcoming'
        assert store.get_league('today')['status'] == 'active'
        assert store.get_league('weekly')['currentWeek'] == 2
        assert store.get_league('friday')['currentWeek'] == 1

    def test_inactive_leagues_untouched(self):
        store = many_leagues_store()
        before = {league_id: store.get_league(league_id) for league_id in ('cancelled', 'done')}
        LeagueProcessor(store).run(WEDNESDAY_6AM)

        for league_id, doc in before.items():
            assert store.get_league(league_id) == doc
            assert store.week_results(league_id) == []
        assert not [n for n in store.notifications() if n['leagueId'] in before]

    def test_second_run_is_a_no_op(self):
        store = many_leagues_store()
        LeagueProcessor(store).run(WEDNESDAY_6AM)
        notifications = len(store.notifications())
        members = store.list_members('weekly')

        report = LeagueProcessor(store).run(WEDNESDAY_6AM)

        assert len(store.notifications()) == notifications
        assert store.list_members('weekly') == members
        assert len(store.week_results('weekly')) == 1
        assert report.phases[PHASE_STARTING].processed == []
        assert report.phases[PHASE_ACTIVATION].processed == []
        # Week 2 has no scores yet
        assert report.phases[PHASE_WEEK_COMPLETION].skipped == ['weekly']

    def test_later_runs_same_day(self):
        store = many_leagues_store()
        for hour in (6, 12, 21):
            LeagueProcessor(store).run(datetime(2026, 6, 10, hour, 0))

        assert len(store.week_results('weekly')) == 1
        assert store.get_league('weekly')['currentWeek'] == 2
        starting = [n for n in store.notifications() if n['type'] == 'league_season_starting']
        assert len(starting) == 2

    def test_reminders_on_play_day(self):
        store = InMemoryStore(
            {
                'leagues': {'L1': make_league(playDay='wednesday', teeTime='08:00')},
                'members': {'L1': {'a': make_member('A'), 'b': make_member('B')}},
                'scores': {'L1': {'s1': make_score('a', 1, 70)}},
            }
        )
        report = LeagueProcessor(store).run(datetime(2026, 6, 10, 14, 0))

        assert report.phases[PHASE_REMINDERS].processed == ['L1']
        reminders = [n for n in store.notifications() if n['type'] == 'league_score_reminder']
        assert [n['userId'] for n in reminders] == ['b']

    def test_missing_tee_time_is_skipped(self):
        store = InMemoryStore({'leagues': {'L1': make_league(playDay='wednesday', teeTime=None)}})
        report = LeagueProcessor(store).run(datetime(2026, 6, 10, 14, 0))
        assert report.phases[PHASE_REMINDERS].skipped == ['L1']
        assert report.failed == []

    def test_invalid_document_fails_alone(self):
        store = many_leagues_store()
        store.data['leagues']['broken'] = make_league(holes=12)
        report = LeagueProcessor(store).run(WEDNESDAY_6AM)

        assert report.phases[PHASE_WEEK_COMPLETION].failed == ['broken']
        assert report.phases[PHASE_WEEK_COMPLETION].processed == ['weekly']

    def test_store_error_is_retried_next_run(self):
        class FlakyStore(InMemoryStore):
            failures = 1

            def set_week_result(self, league_id, week, record):
                if league_id == 'flaky' and self.failures:
                    self.failures -= 1
                    raise RuntimeError('write failed')
                return super().set_week_result(league_id, week, record)

        store = FlakyStore(many_leagues_store().data)
        store.data['leagues']['flaky'] = make_league()
        store.data['members']['flaky'] = {'a': make_member('A'), 'b': make_member('B')}
        store.data['scores']['flaky'] = {'s1': make_score('a', 1, 70), 's2': make_score('b', 1, 75)}

        report = LeagueProcessor(store).run(WEDNESDAY_6AM)

        assert report.failed == ['flaky']
        assert 'weekly' in report.phases[PHASE_WEEK_COMPLETION].processed
        doc = store.get_league('flaky')
        assert '_lastProcessedWeek' not in doc
        assert doc['currentWeek'] == 1
        assert doc['_processingWeek'] is None
        assert doc['_processingSince'] is None

        report = LeagueProcessor(store).run(datetime(2026, 6, 10, 12, 0))

        assert report.phases[PHASE_WEEK_COMPLETION].processed == ['flaky']
        assert len(store.week_results('flaky')) == 1
        doc = store.get_league('flaky')
        assert doc['currentWeek'] == 2
        assert doc['_lastProcessedWeek'] == 1
        assert store.list_members('flaky')['a']['totalPoints'] == 2
        assert store.list_members('flaky')['b']['totalPoints'] == 1

    def test_odd_nested_fields_do_not_stop_the_run(self):
        store = many_leagues_store()
        store.data['leagues']['listed'] = make_league(elevatedEvents=[2, 3])
        store.data['leagues']['flat_purse'] = make_league(purse=100)

        report = LeagueProcessor(store).run(WEDNESDAY_6AM)

        assert report.phases[PHASE_WEEK_COMPLETION].processed == ['weekly']
        assert report.failed == []
        assert store.get_league('weekly')['currentWeek'] == 2

    def test_unreadable_document_fails_alone(self):
        class OddStore(InMemoryStore):
            def query_leagues(self, status=None, play_day=None):
                leagues = super().query_leagues(status, play_day)
                if play_day == 'tuesday':
                    leagues['junk'] = ['not', 'a', 'document']
                return leagues

        store = OddStore(many_leagues_store().data)
        report = LeagueProcessor(store).run(WEDNESDAY_6AM)

        assert report.phases[PHASE_WEEK_COMPLETION].failed == ['junk']
        assert report.phases[PHASE_WEEK_COMPLETION].processed == ['weekly']

    def test_stranded_week_is_advanced(self):
        store = many_leagues_store()
        LeagueProcessor(store).run(WEDNESDAY_6AM)
        # Standings recorded for week 1 but the week was never advanced
        store.data['leagues']['weekly']['currentWeek'] = 1
        members = store.list_members('weekly')

        report = LeagueProcessor(store).run(datetime(2026, 6, 10, 12, 0))

        assert report.phases[PHASE_WEEK_COMPLETION].processed == ['weekly']
        assert store.get_league('weekly')['currentWeek'] == 2
        assert store.list_members('weekly') == members
        assert len(store.week_results('weekly')) == 1

    def test_timezone_aware_now(self):
        from zoneinfo import ZoneInfo

        store = many_leagues_store()
        # 10:00 UTC is 06:00 in New York
        now = datetime(2026, 6, 10, 10, 0, tzinfo=ZoneInfo('UTC'))
        report = LeagueProcessor(store).run(now)
        assert report.started_at.hour == 6
        assert report.phases[PHASE_WEEK_COMPLETION].processed == ['weekly']

    def test_summary(self):
        report = process_leagues(many_leagues_store(), WEDNESDAY_6AM)
        summary = report.summary()
        assert summary.startswith('League processor run at 2026-06-10T06:00:00')
        assert 'week_completion: 1 processed, 0 skipped, 0 failed' in summary
