"""
Motion tests: closed-form positions, split ticks, braking and segment changes.
"""

import math
import unittest

from core.errors import SimulationInvariantError
from core.kinematics import advance, brake, stopping_distance, update_vehicle
from core.world import World
from entities.vehicle import Vehicle


def make_vehicle(velocity=0.0, acceleration=0.0, break_deceleration=10.0, position=0.0):
    return Vehicle(
        vehicle_id="T",
        route=(0,),
        position=position,
        velocity=velocity,
        acceleration=acceleration,
        break_deceleration=break_deceleration,
        watch_distance=0.0,
        destination=0,
        destination_position=0.0,
    )


def straight_world(length=1000.0, speed_limit=100.0, end_speed_limit=100.0):
    world = World()
    world.add_road((0.0, 0.0, 0.0), (length, 0.0, 0.0), 1, speed_limit, [], [], end_speed_limit)
    return world


def two_road_world(first_length=100.0, speed_limit=20.0, end_speed_limit=20.0, second_length=200.0):
    world = World()
    world.add_road((0.0, 0.0, 0.0), (first_length, 0.0, 0.0), 1, speed_limit, [], [1], end_speed_limit)
    world.add_road((first_length, 0.0, 0.0), (first_length + second_length, 0.0, 0.0), 1, speed_limit,
                   [0], [], end_speed_limit)
    return world


class AdvanceTests(unittest.TestCase):
    def test_full_tick_below_target(self):
        vehicle = make_vehicle(velocity=10.0)
        advance(vehicle, 2.0, 100.0, 3.0)
        self.assertAlmostEqual(vehicle.position, 10.0 * 3 + 2.0 * 9 / 2)
        self.assertAlmostEqual(vehicle.velocity, 16.0)

    def test_split_tick_when_target_reached(self):
        vehicle = make_vehicle(velocity=95.0)
        advance(vehicle, 5.0, 100.0, 2.0)
        # 1 time unit accelerating (95 + 2.5), then 1 time unit at 100
        self.assertAlmostEqual(vehicle.position, 197.5)
        self.assertEqual(vehicle.velocity, 100.0)

    def test_split_tick_when_braking_to_stop(self):
        vehicle = make_vehicle(velocity=10.0)
        advance(vehicle, -4.0, 0.0, 5.0)
        self.assertAlmostEqual(vehicle.position, 12.5)
        self.assertEqual(vehicle.velocity, 0.0)

    def test_zero_rate_keeps_velocity(self):
        vehicle = make_vehicle(velocity=7.0)
        advance(vehicle, 0.0, 100.0, 2.0)
        self.assertAlmostEqual(vehicle.position, 14.0)
        self.assertEqual(vehicle.velocity, 7.0)

    def test_rate_away_from_target_fails(self):
        vehicle = make_vehicle(velocity=10.0)
        with self.assertRaises(SimulationInvariantError):
            advance(vehicle, 5.0, 0.0, 1.0)


class BrakeTests(unittest.TestCase):
    def test_required_deceleration_uses_early_stop_margin(self):
        vehicle = make_vehicle(velocity=20.0, break_deceleration=40.0)
        # margin 0.1 * 20 = 2 -> effective distance 20 -> 400 / 40 = 10
        brake(vehicle, 0.0, 22.0, 1.0)
        self.assertAlmostEqual(vehicle.velocity, 10.0)
        self.assertAlmostEqual(vehicle.position, 15.0)

    def test_deceleration_capped_at_capacity(self):
        vehicle = make_vehicle(velocity=20.0, break_deceleration=40.0)
        brake(vehicle, 0.0, 7.0, 1.0)
        self.assertEqual(vehicle.velocity, 0.0)
        self.assertAlmostEqual(vehicle.position, 5.0)

    def test_margin_never_makes_distance_negative(self):
        vehicle = make_vehicle(velocity=20.0, break_deceleration=40.0)
        brake(vehicle, 0.0, 1.0, 1.0)
        self.assertEqual(vehicle.velocity, 0.0)
        self.assertAlmostEqual(vehicle.position, 5.0)

    def test_zero_capacity_keeps_velocity(self):
        vehicle = make_vehicle(velocity=20.0, break_deceleration=0.0)
        brake(vehicle, 0.0, 1.0, 1.0)
        self.assertEqual(vehicle.velocity, 20.0)
        self.assertAlmostEqual(vehicle.position, 20.0)
        self.assertEqual(stopping_distance(vehicle), math.inf)

    def test_braking_toward_higher_speed_fails(self):
        vehicle = make_vehicle(velocity=5.0, break_deceleration=10.0)
        with self.assertRaises(SimulationInvariantError):
            brake(vehicle, 8.0, 10.0, 1.0)

    def test_negative_deceleration_is_taken_as_magnitude(self):
        vehicle = make_vehicle(velocity=10.0, break_deceleration=-10.0)
        self.assertEqual(vehicle.break_deceleration, 10.0)
        self.assertAlmostEqual(stopping_distance(vehicle), 10.0)


class FreeAccelerationTests(unittest.TestCase):
    def test_positions_follow_closed_form(self):
        world = straight_world()
        vehicle = world.add_vehicle(0.0, 0.0, 5.0, 10.0, 0, 10.0, 0, 1000.0)

        for n in range(1, 11):
            world.step(1.0)
            self.assertAlmostEqual(vehicle.velocity, 5.0 * n)
            self.assertAlmostEqual(vehicle.position, 2.5 * n ** 2)

        self.assertAlmostEqual(vehicle.position, 250.0)

    def test_reaches_speed_limit_mid_tick(self):
        world = straight_world()
        vehicle = world.add_vehicle(0.0, 95.0, 5.0, 50.0, 0, 10.0, 0, 1000.0)

        world.step(2.0)

        self.assertEqual(vehicle.velocity, 100.0)
        self.assertAlmostEqual(vehicle.position, 197.5)

        world.step(1.0)

        self.assertEqual(vehicle.velocity, 100.0)
        self.assertAlmostEqual(vehicle.position, 297.5)

    def test_zero_acceleration_advances_at_constant_velocity(self):
        world = straight_world()
        vehicle = world.add_vehicle(0.0, 10.0, 0.0, 10.0, 0, 10.0, 0, 1000.0)

        for _ in range(3):
            world.step(1.0)

        self.assertEqual(vehicle.velocity, 10.0)
        self.assertAlmostEqual(vehicle.position, 30.0)

    def test_zero_time_step_does_not_move(self):
        world = straight_world()
        vehicle = world.add_vehicle(10.0, 10.0, 5.0, 10.0, 0, 10.0, 0, 1000.0)
        world.step(0.0)
        self.assertEqual(vehicle.position, 10.0)
        self.assertEqual(vehicle.velocity, 10.0)

    def test_negative_time_step_fails(self):
        world = straight_world()
        vehicle = world.add_vehicle(0.0, 0.0, 5.0, 10.0, 0, 10.0, 0, 1000.0)
        with self.assertRaises(SimulationInvariantError):
            update_vehicle(vehicle, world.network, -1.0)


class ObstacleTests(unittest.TestCase):
    def test_rear_vehicle_does_not_pass_through_leader(self):
        world = straight_world(length=500.0, speed_limit=50.0, end_speed_limit=50.0)
        rear = world.add_vehicle(0.0, 20.0, 2.0, 40.0, 0, 100.0, 0, 500.0)
        lead = world.add_vehicle(12.0, 5.0, 0.0, 40.0, 0, 100.0, 0, 500.0)

        world.step(1.0)

        self.assertLessEqual(rear.velocity, 5.0 + 1e-9)
        self.assertLess(rear.position, lead.position)
        self.assertAlmostEqual(lead.position, 17.0)

    def test_slows_to_end_speed_limit_before_road_end(self):
        world = World()
        world.add_road((0.0, 0.0, 0.0), (100.0, 0.0, 0.0), 1, 30.0, [], [1], 10.0)
        world.add_road((100.0, 0.0, 0.0), (300.0, 0.0, 0.0), 1, 30.0, [0], [], 30.0)
        vehicle = world.add_vehicle(0.0, 30.0, 2.0, 20.0, 0, 200.0, 1, 200.0)

        for _ in range(1000):
            world.step(0.05)
            if vehicle.on_road == 1:
                break
            self.assertLessEqual(vehicle.velocity, 30.0)

        self.assertEqual(vehicle.on_road, 1)
        self.assertLessEqual(vehicle.velocity, 10.0 + 1e-6)

    def test_velocity_never_exceeds_limit_or_goes_negative(self):
        world = two_road_world(speed_limit=15.0, end_speed_limit=5.0)
        vehicles = [
            world.add_vehicle(0.0, 0.0, 3.0, 6.0, 0, 40.0, 1, 150.0),
            world.add_vehicle(30.0, 2.0, 1.0, 6.0, 0, 40.0, 1, 180.0),
        ]

        for _ in range(2000):
            world.step(0.25)
            for vehicle in world.vehicles:
                limit = world.roads[vehicle.on_road].speed_limit
                self.assertGreaterEqual(vehicle.velocity, 0.0)
                self.assertLessEqual(vehicle.velocity, limit + 1e-9)
            if world.is_empty():
                break

        self.assertTrue(world.is_empty())
        self.assertTrue(all(vehicle.arrived for vehicle in vehicles))


class SegmentTransitionTests(unittest.TestCase):
    def test_overshoot_carried_into_next_segment(self):
        world = two_road_world()
        vehicle = world.add_vehicle(95.0, 10.0, 0.0, 10.0, 0, 1.0, 1, 150.0)

        world.step(1.0)

        self.assertEqual(vehicle.on_road, 1)
        self.assertAlmostEqual(vehicle.position, 5.0)
        self.assertEqual(vehicle.path, [])
        self.assertEqual(world.roads[0].obstacles.transient_count(), 0)
        self.assertEqual(world.roads[1].obstacles.transient_count(), 1)

    def test_vehicle_created_past_segment_end(self):
        world = two_road_world()
        vehicle = world.add_vehicle(120.0, 10.0, 0.0, 10.0, 0, 1.0, 1, 150.0)

        world.step(1.0)

        self.assertEqual(vehicle.on_road, 1)
        self.assertAlmostEqual(vehicle.position, 30.0)

    def test_crosses_zero_length_segment(self):
        world = World()
        world.add_road((0.0, 0.0, 0.0), (100.0, 0.0, 0.0), 1, 20.0, [], [1], 20.0)
        world.add_road((100.0, 0.0, 0.0), (100.0, 0.0, 0.0), 1, 20.0, [0], [2], 20.0)
        world.add_road((100.0, 0.0, 0.0), (200.0, 0.0, 0.0), 1, 20.0, [1], [], 20.0)
        vehicle = world.add_vehicle(95.0, 10.0, 0.0, 10.0, 0, 1.0, 2, 100.0)

        world.step(1.0)

        self.assertEqual(vehicle.on_road, 2)
        self.assertAlmostEqual(vehicle.position, 5.0)

    def test_entering_slower_segment_caps_velocity(self):
        world = World()
        world.add_road((0.0, 0.0, 0.0), (100.0, 0.0, 0.0), 1, 20.0, [], [1], 20.0)
        world.add_road((100.0, 0.0, 0.0), (300.0, 0.0, 0.0), 1, 8.0, [0], [], 8.0)
        vehicle = world.add_vehicle(95.0, 10.0, 0.0, 10.0, 0, 1.0, 1, 150.0)

        world.step(1.0)

        self.assertEqual(vehicle.on_road, 1)
        self.assertEqual(vehicle.velocity, 8.0)

    def test_exhausted_route_fails_loudly(self):
        world = two_road_world()
        vehicle = Vehicle(
            vehicle_id="lost",
            route=(0,),
            position=95.0,
            velocity=10.0,
            acceleration=0.0,
            break_deceleration=10.0,
            watch_distance=1.0,
            destination=1,
            destination_position=50.0,
        )

        with self.assertRaises(SimulationInvariantError):
            update_vehicle(vehicle, world.network, 1.0)


class ArrivalTests(unittest.TestCase):
    def test_stops_at_destination_and_is_removed_once(self):
        world = straight_world(length=500.0, speed_limit=20.0, end_speed_limit=20.0)
        vehicle = world.add_vehicle(0.0, 0.0, 2.0, 4.0, 0, 50.0, 0, 300.0)

        arrivals = []
        for _ in range(2000):
            arrivals.extend(world.step(0.5))
            if world.is_empty():
                break

        self.assertEqual(arrivals, [vehicle])
        self.assertTrue(vehicle.arrived)
        self.assertEqual(vehicle.velocity, 0.0)
        self.assertGreaterEqual(vehicle.position, 290.0)
        self.assertLessEqual(vehicle.position, 300.0 + 1e-6)
        self.assertEqual(world.roads[0].obstacles.transient_count(), 0)
        self.assertEqual(list(world.roads[0].obstacles.items()), [(500.0, 20.0)])

    def test_removal_keeps_other_vehicles_intact(self):
        world = straight_world(length=1000.0, speed_limit=20.0, end_speed_limit=20.0)
        first = world.add_vehicle(0.0, 0.0, 1.0, 5.0, 0, 50.0, 0, 900.0)
        short_trip = world.add_vehicle(100.0, 0.0, 2.0, 5.0, 0, 50.0, 0, 110.0)
        last = world.add_vehicle(300.0, 0.0, 1.0, 5.0, 0, 50.0, 0, 900.0)

        arrivals = []
        for _ in range(500):
            arrivals.extend(world.step(0.5))
            if short_trip.arrived:
                break

        self.assertEqual(arrivals, [short_trip])
        self.assertEqual([v.id for v in world.vehicles], [first.id, last.id])
        self.assertEqual(world.roads[0].obstacles.transient_count(), 2)
        self.assertGreater(last.position, first.position)

    def test_vehicle_starting_from_rest_near_destination_is_not_removed(self):
        world = straight_world(length=1000.0, speed_limit=20.0, end_speed_limit=20.0)
        vehicle = world.add_vehicle(92.0, 0.0, 1.0, 5.0, 0, 50.0, 0, 100.0)

        self.assertEqual(world.step(0.04), [])
        self.assertEqual(world.vehicles, [vehicle])
        self.assertFalse(vehicle.arrived)
        self.assertAlmostEqual(vehicle.velocity, 0.04)

        arrivals = []
        for _ in range(5000):
            arrivals.extend(world.step(0.04))
            if world.is_empty():
                break

        self.assertEqual(arrivals, [vehicle])
        self.assertGreaterEqual(vehicle.position, 90.0)
        self.assertLessEqual(vehicle.position, 100.0 + 1e-6)

    def test_destination_braking_still_stops_behind_stopped_leader(self):
        world = straight_world(length=1000.0, speed_limit=30.0, end_speed_limit=30.0)
        follower = world.add_vehicle(0.0, 20.0, 2.0, 5.0, 0, 100.0, 0, 70.0)
        leader = world.add_vehicle(55.0, 0.0, 0.0, 5.0, 0, 50.0, 0, 900.0)

        for _ in range(300):
            self.assertEqual(world.step(0.1), [])
            self.assertLess(follower.position, leader.position)

        self.assertEqual(leader.position, 55.0)
        self.assertLess(follower.position, 50.5)
        self.assertLess(follower.velocity, 1.0)
        self.assertEqual(world.vehicles, [follower, leader])


if __name__ == '__main__':
    unittest.main()
