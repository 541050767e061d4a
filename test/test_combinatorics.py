import itertools
from basketminer.Utility.Combinatorics import Subsets, Permutations, canonicalKey, joinKey, parseKey, \
    hashKey, splitPermutation, bipartitions, sortMapByValues


def test_subsets_of_size():
    subsets=list(Subsets([3,1,2,4],2))
    assert subsets==[(1,2),(1,3),(1,4),(2,3),(2,4),(3,4)]
    assert len(Subsets([3,1,2,4],2))==6


def test_subsets_restartable_and_collapse_duplicates():
    subsets=Subsets([2,2,1,3],2)
    assert list(subsets)==list(subsets)
    assert len(subsets)==3


def test_subsets_larger_than_items_is_empty():
    assert list(Subsets([1,2],3))==[]
    assert len(Subsets([1,2],3))==0


def test_permutations_cover_every_ordering():
    perms=list(Permutations([3,1,2]))
    assert len(perms)==6
    assert len(set(perms))==6
    assert set(perms)==set(itertools.permutations([1,2,3]))


def test_canonical_key_sorts_numerically():
    assert canonicalKey([10,2,1])=="1;2;10"
    assert canonicalKey((2,10))==canonicalKey([10,2])


def test_join_key_keeps_order():
    assert joinKey([3,1,2])=="3;1;2"
    assert parseKey("3;1;2")==(3,1,2)
    assert parseKey("7|8",separator="|")==(7,8)


def test_hash_key_is_stable_and_bounded():
    assert hashKey("1;2;3",1024)==hashKey("1;2;3",1024)
    for key in ("1","1;2","2;3;4","100;200"):
        assert 0<=hashKey(key,64)<64


def test_split_permutation():
    assert list(splitPermutation((1,2,3)))==[((1,),(2,3)),((1,2),(3,))]
    assert list(splitPermutation((1,)))==[]


def test_bipartitions_count():
    for n in range(2,6):
        parts=list(bipartitions(range(n)))
        assert len(parts)==2**n-2
        assert len(set(parts))==len(parts)


def test_sort_map_by_values_descending_with_tie_break():
    ranked=sortMapByValues({"b":0.5,"a":0.5,"c":0.9})
    assert ranked==[("c",0.9),("a",0.5),("b",0.5)]
