import numpy as np
from basketminer.Utility.Combinatorics import hashKey


class Whitelist(object):
    """
    bit vector addressed by the crc32 hash of a canonical itemset key

    membership is probabilistic: two keys hashing to the same bit collide, so
    contains() may report a key that was never added, but never misses one that was.
    with n keys in m bits the false positive rate is about 1-exp(-n/m)
    """
    def __init__(self,numBits,bits=None):
        self.numBits=int(numBits)
        numBytes=(self.numBits+7)//8
        if bits is None:
            self.bits=np.zeros(numBytes,dtype=np.uint8)
        else:
            bits=np.asarray(bits,dtype=np.uint8)
            if bits.shape!=(numBytes,):
                raise ValueError("expected {} bytes for {} bits, got shape {}".format(numBytes,self.numBits,bits.shape))
            self.bits=bits.copy()

    def _address(self,key):
        h=hashKey(key,self.numBits)
        return h>>3,np.uint8(1<<(h&7))

    def add(self,key):
        byte,mask=self._address(key)
        self.bits[byte]|=mask

    def contains(self,key):
        byte,mask=self._address(key)
        return bool(self.bits[byte]&mask)

    __contains__=contains

    def merge(self,other):
        if other.numBits!=self.numBits:
            raise ValueError("cannot merge whitelists of {} and {} bits".format(self.numBits,other.numBits))
        np.bitwise_or(self.bits,other.bits,out=self.bits)
        return self

    def cardinality(self):
        return int(np.unpackbits(self.bits).sum())

    def falsePositiveRate(self):
        return self.cardinality()/float(self.numBits)
