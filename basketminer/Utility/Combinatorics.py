import itertools
import math
import zlib


class Subsets(object):
    """
    all subsets of a given size of an item collection, in ascending item order
    iterating twice gives the same sequence
    """
    def __init__(self,items,size):
        self.items=sorted(set(items))
        self.size=size

    def __iter__(self):
        if self.size<0 or self.size>len(self.items):
            return iter(())
        return itertools.combinations(self.items,self.size)

    def __len__(self):
        if self.size<0 or self.size>len(self.items):
            return 0
        return math.comb(len(self.items),self.size)


class Permutations(object):
    "every ordering of an item collection (duplicates collapse)"
    def __init__(self,items):
        self.items=sorted(set(items))

    def __iter__(self):
        return itertools.permutations(self.items)

    def __len__(self):
        return math.factorial(len(self.items))


def canonicalKey(ids,separator=";"):
    return separator.join(map(str,sorted(ids)))

def joinKey(ids,separator=";"):
    #keeps the given order
    return separator.join(map(str,ids))

def parseKey(key,separator=";"):
    return tuple(int(k) for k in key.split(separator))

def hashKey(key,numBits):
    #crc32 is stable across processes, unlike hash()
    return zlib.crc32(key.encode("utf-8"))%numBits

def splitPermutation(ids):
    "all (antecedent,consequent) cuts of one ordering, d=1..n-1"
    for d in range(1,len(ids)):
        yield ids[:d],ids[d:]

def bipartitions(items):
    "all distinct (antecedent,consequent) pairs of non-empty disjoint sides covering items"
    items=sorted(set(items))
    for d in range(1,len(items)):
        for ante in itertools.combinations(items,d):
            cons=tuple(i for i in items if i not in ante)
            yield ante,cons

def sortMapByValues(mapping,reverse=True):
    #ties broken by key so the order is deterministic
    if reverse:
        return sorted(mapping.items(),key=lambda kv:(-kv[1],kv[0]))
    return sorted(mapping.items(),key=lambda kv:(kv[1],kv[0]))
